"""Request-scoped pipeline that turns a request path into a file delivery."""
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import BinaryIO

import structlog
from structlog.typing import FilteringBoundLogger

from media_api.delivery.detector import SIGNATURES, Signature, scan
from media_api.delivery.dotfiles import check_dotfile
from media_api.delivery.errors import AssetNotFoundError, DeliveryError
from media_api.delivery.normalizer import RequestPath, expand_forms
from media_api.delivery.policy import (
    Disposition,
    classify,
    media_type,
    security_headers,
)
from media_api.delivery.sandbox import StaticRoot, resolve_within
from media_api.delivery.validators import ByteRange, entity_tag, http_date

DEFAULT_CHUNK_SIZE = 64 * 1024


class DeliveryStage(str, Enum):
    """Last stage a request completed before it was delivered or rejected."""

    START = "start"
    PATH_CHECKED = "path_checked"
    DOTFILE_CHECKED = "dotfile_checked"
    SANDBOXED = "sandboxed"
    CLASSIFIED = "classified"
    DELIVERED = "delivered"


class FileChunks:
    """Iterator over a span of an open file that owns the file handle.

    The handle is released when the span is exhausted, when a read fails,
    or when ``close`` is called, whether or not iteration ever started.
    """

    def __init__(
        self,
        handle: BinaryIO,
        start: int,
        length: int,
        chunk_size: int,
        logger: FilteringBoundLogger | None = None,
        path: Path | None = None,
    ) -> None:
        self._handle = handle
        self._start = start
        self._remaining = length
        self._chunk_size = chunk_size
        self._logger = logger
        self._path = path
        self._positioned = False

    def __iter__(self) -> "FileChunks":
        return self

    def __next__(self) -> bytes:
        if self._handle.closed or self._remaining <= 0:
            self.close()
            raise StopIteration

        try:
            if not self._positioned:
                self._handle.seek(self._start)
                self._positioned = True
            chunk = self._handle.read(min(self._chunk_size, self._remaining))
        except OSError as e:
            # Headers are already sent; end the body early.
            if self._logger is not None:
                self._logger.warning("asset_stream_failed", path=str(self._path), error=str(e))
            self.close()
            raise StopIteration from e

        if not chunk:
            self.close()
            raise StopIteration
        self._remaining -= len(chunk)
        return chunk

    def close(self) -> None:
        """Release the file handle. Safe to call more than once."""
        self._handle.close()


@dataclass
class Delivery:
    """An opened file ready to be streamed to the client.

    The handle is owned by this object until ``stream`` hands it to a
    ``FileChunks`` iterator; ``close`` releases it on every other path and
    may be called repeatedly.

    Attributes:
        path: Canonical path of the file.
        disposition: Inline or attachment.
        media_type: Content-Type of the file.
        size: Byte length at open time.
        mtime: Modification time at open time.
        etag: Entity tag derived from the open file's metadata.
        headers: Security, caching and validator headers for the response.
    """

    path: Path
    disposition: Disposition
    media_type: str
    size: int
    mtime: float
    etag: str
    headers: dict[str, str]
    handle: BinaryIO = field(repr=False)
    chunk_size: int = DEFAULT_CHUNK_SIZE
    logger: FilteringBoundLogger | None = field(default=None, repr=False)

    @property
    def last_modified(self) -> str:
        return self.headers["Last-Modified"]

    def stream(self, byte_range: ByteRange | None = None) -> FileChunks:
        """Iterate over the file contents in chunks.

        A read error after headers are sent ends the body early; it is
        logged, never surfaced to the client.

        Args:
            byte_range: Span to send. The whole file when None.

        Returns:
            Closable iterator of successive chunks.
        """
        if byte_range is None:
            byte_range = ByteRange(0, self.size - 1)
        return FileChunks(
            self.handle,
            byte_range.start,
            byte_range.length,
            self.chunk_size,
            logger=self.logger,
            path=self.path,
        )

    def close(self) -> None:
        """Release the file handle. Safe to call more than once."""
        self.handle.close()


class AssetPipeline:
    """Runs the security checks for a media request and opens the file.

    Stages run in a fixed order and the first failure is terminal:
    signature scan, dotfile check, sandbox resolution, classification,
    open. The pipeline holds no per-request state, so one instance serves
    every concurrent request.

    Attributes:
        root: Directory files are served from.
    """

    def __init__(
        self,
        root: StaticRoot,
        logger: FilteringBoundLogger | None = None,
        *,
        cache_max_age: int = 86400,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        signatures: tuple[Signature, ...] = SIGNATURES,
    ) -> None:
        """Initialize pipeline.

        Args:
            root: Directory files are served from.
            logger: Logger for rejections and deliveries.
            cache_max_age: Seconds for the Cache-Control header.
            chunk_size: Bytes per streamed chunk.
            signatures: Traversal signature table.
        """
        self.root = root
        if logger is None:
            logger = structlog.get_logger()
        self._logger = logger.bind(static_root=str(root.path))
        self._cache_max_age = cache_max_age
        self._chunk_size = chunk_size
        self._signatures = signatures

    def prepare(self, request_path: RequestPath) -> Delivery:
        """Validate a request path and open the file it names.

        Args:
            request_path: Raw and normalized forms of the path, relative to
                the mount prefix.

        Returns:
            Delivery holding the open file and response headers.

        Raises:
            InvalidPathError: On a traversal signature, decode failure or
                sandbox escape.
            DotfileAccessDeniedError: If the path names a hidden entry.
            AssetNotFoundError: If no readable regular file exists.
        """
        stage = DeliveryStage.START
        try:
            scan(expand_forms(request_path), self._signatures)
            stage = DeliveryStage.PATH_CHECKED

            check_dotfile(request_path.relative)
            stage = DeliveryStage.DOTFILE_CHECKED

            resolved = resolve_within(self.root, request_path.relative)
            stage = DeliveryStage.SANDBOXED

            disposition = classify(resolved.name)
            headers = security_headers(disposition, self._cache_max_age)
            stage = DeliveryStage.CLASSIFIED

            handle, stat = self._open(resolved, request_path.relative)
        except DeliveryError as e:
            self._logger.warning(
                "asset_rejected",
                code=e.code,
                stage=stage.value,
                reason=e.detail,
                raw_path=request_path.raw,
            )
            raise

        etag = entity_tag(stat.st_mtime_ns, stat.st_size)
        headers["ETag"] = etag
        headers["Last-Modified"] = http_date(stat.st_mtime)

        self._logger.debug(
            "asset_delivered",
            stage=DeliveryStage.DELIVERED.value,
            path=request_path.relative,
            disposition=disposition.value,
            size=stat.st_size,
        )
        return Delivery(
            path=resolved,
            disposition=disposition,
            media_type=media_type(resolved.name),
            size=stat.st_size,
            mtime=stat.st_mtime,
            etag=etag,
            headers=headers,
            handle=handle,
            chunk_size=self._chunk_size,
            logger=self._logger,
        )

    @staticmethod
    def _open(resolved: Path, relative: str) -> tuple[BinaryIO, os.stat_result]:
        """Open a resolved file and stat the open handle.

        Args:
            resolved: Canonical path inside the static root.
            relative: Request path, for error context.

        Returns:
            Tuple of (binary handle, stat of the opened file).

        Raises:
            AssetNotFoundError: If the file vanished or cannot be read.
        """
        try:
            handle = resolved.open("rb")
        except OSError as e:
            raise AssetNotFoundError(f"open failed: {e}", relative) from e

        try:
            stat = os.fstat(handle.fileno())
        except OSError as e:
            handle.close()
            raise AssetNotFoundError(f"stat failed: {e}", relative) from e
        return handle, stat
