"""Uploaded media delivery endpoint."""
from fastapi import APIRouter, Request
from fastapi.responses import Response, StreamingResponse
from starlette.concurrency import run_in_threadpool
from starlette.types import Receive, Scope, Send

from media_api.delivery import (
    AssetPipeline,
    ByteRange,
    Delivery,
    DeliveryError,
    ErrorResponse,
    RequestPath,
    is_not_modified,
    parse_range,
    range_applies,
)

router = APIRouter(tags=["uploads"])


def request_path_from_scope(scope: Scope, prefix: str, path: str) -> RequestPath:
    """Collect the raw and framework-normalized forms of a media path.

    The raw form is taken from the undecoded request target with the root
    path and mount prefix removed. When the target does not start with the
    prefix as sent, the whole target is kept so nothing escapes the scan.

    Args:
        scope: ASGI connection scope.
        prefix: Mount prefix of the media router.
        path: Path parameter extracted by the router.

    Returns:
        RequestPath relative to the mount prefix.
    """
    raw_target = scope.get("raw_path") or b""
    raw = raw_target.decode("latin-1")
    leading = scope.get("root_path", "") + prefix
    if raw.startswith(leading + "/"):
        raw = raw[len(leading) + 1:]
    elif raw == leading:
        raw = ""
    return RequestPath(raw=raw, normalized=path)


class DeliveryResponse(StreamingResponse):
    """Streaming response that releases the delivery's file handle.

    The handle is closed once the response finishes, including when the
    client disconnects or the task is cancelled before the first chunk.
    """

    def __init__(
        self,
        delivery: Delivery,
        byte_range: ByteRange | None,
        status_code: int,
        headers: dict[str, str],
    ) -> None:
        self.delivery = delivery
        super().__init__(
            delivery.stream(byte_range),
            status_code=status_code,
            headers=headers,
            media_type=delivery.media_type,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            self.delivery.close()


def build_response(request: Request, delivery: Delivery) -> Response:
    """Choose between 304, 206 and 200 for a prepared delivery.

    Args:
        request: Incoming HTTP request.
        delivery: Opened file with its validators.

    Returns:
        Response for the request; HEAD responses carry no body.

    Raises:
        RangeNotSatisfiableError: If the requested range starts past the
            end of the file.
    """
    headers = {**delivery.headers, "Accept-Ranges": "bytes"}

    if is_not_modified(request.headers, delivery.etag, delivery.mtime):
        delivery.close()
        return Response(status_code=304, headers=headers)

    byte_range = None
    if range_applies(request.headers, delivery.etag, delivery.last_modified):
        byte_range = parse_range(request.headers.get("range"), delivery.size)

    if byte_range is None:
        status_code = 200
        headers["Content-Length"] = str(delivery.size)
    else:
        status_code = 206
        headers["Content-Length"] = str(byte_range.length)
        headers["Content-Range"] = byte_range.content_range(delivery.size)

    if request.method == "HEAD":
        delivery.close()
        return Response(status_code=status_code, headers=headers, media_type=delivery.media_type)

    return DeliveryResponse(delivery, byte_range, status_code, headers)


@router.api_route(
    "/{path:path}",
    methods=["GET", "HEAD"],
    response_class=Response,
    responses={
        200: {"description": "File contents"},
        206: {"description": "Requested byte range"},
        304: {"description": "Cached copy is current"},
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        416: {"model": ErrorResponse},
    },
    summary="Get uploaded file",
    description="Streams a file from the static root after path security checks.",
)
async def get_upload(
    request: Request,
    path: str,
) -> Response:
    """Deliver an uploaded file.

    Rejections propagate as DeliveryError and are rendered by the
    application's exception handler.

    Args:
        request: Incoming HTTP request.
        path: Path of the file relative to the mount prefix.

    Returns:
        Streaming response with the file bytes or the requested range,
        304 when the client copy is current, or headers only for HEAD.
    """
    pipeline: AssetPipeline = request.app.state.pipeline
    prefix = request.app.state.settings.mount_prefix

    request_path = request_path_from_scope(request.scope, prefix, path)
    delivery = await run_in_threadpool(pipeline.prepare, request_path)
    try:
        return build_response(request, delivery)
    except DeliveryError:
        delivery.close()
        raise
