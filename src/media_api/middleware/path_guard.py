"""Application-wide path traversal guard."""
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from media_api.delivery import DeliveryError, InvalidPathError, RequestPath, expand_forms, scan

logger = structlog.get_logger()

SYSTEM_PREFIXES: tuple[str, ...] = (
    "/etc/",
    "/proc/",
    "/sys/",
    "/dev/",
    "/root/",
    "/home/",
    "/usr/local/",
    "/var/log/",
    "/boot/",
    "/tmp/",
    "/opt/",
)

SENSITIVE_FILES: frozenset[str] = frozenset({
    "/etc/passwd",
    "/etc/shadow",
    "/etc/hosts",
    "/proc/version",
    "/proc/cpuinfo",
})


def is_system_location(path: str) -> bool:
    """Check if a normalized request path names a system location.

    HTTP clients and proxies collapse ``..`` segments before sending, so
    ``/uploads/../../etc/passwd`` arrives as ``/etc/passwd`` with no
    traversal left to detect.

    Args:
        path: Decoded request path.

    Returns:
        True if the path starts in a system directory or names a
        sensitive file.
    """
    if path in SENSITIVE_FILES:
        return True
    return path.startswith(SYSTEM_PREFIXES)


class PathGuardMiddleware(BaseHTTPMiddleware):
    """Middleware that rejects traversal attempts before routing.

    Every request path is scanned in raw, normalized and decoded form.
    The media route repeats the full check against its own path, so this
    layer is not the only defense.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Scan the request path and reject on any traversal signature.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware or route handler.

        Returns:
            HTTP response, or 400 if the path is rejected.
        """
        raw_target = request.scope.get("raw_path") or b""
        request_path = RequestPath(
            raw=raw_target.decode("latin-1"),
            normalized=request.scope.get("path", ""),
        )

        try:
            scan(expand_forms(request_path))
            if is_system_location(request_path.normalized):
                raise InvalidPathError("system location", request_path.normalized)
        except DeliveryError as e:
            logger.warning(
                "path_guard_rejected",
                code=e.code,
                reason=e.detail,
                raw_path=request_path.raw,
            )
            return JSONResponse(status_code=e.status_code, content=e.to_body())

        return await call_next(request)
