"""Cache validators, conditional requests and byte ranges."""
import re
from collections.abc import Mapping
from dataclasses import dataclass
from email.utils import formatdate, parsedate_to_datetime

from media_api.delivery.errors import RangeNotSatisfiableError

# Only a single range is honored; anything else falls back to the full file.
SINGLE_RANGE = re.compile(r"^\s*bytes\s*=\s*(\d*)\s*-\s*(\d*)\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class ByteRange:
    """Inclusive span of bytes within a file."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def content_range(self, size: int) -> str:
        return f"bytes {self.start}-{self.end}/{size}"


def entity_tag(mtime_ns: int, size: int) -> str:
    """Build a strong entity tag from modification time and size.

    Args:
        mtime_ns: Modification time in nanoseconds.
        size: File size in bytes.

    Returns:
        Quoted entity tag.
    """
    return f'"{mtime_ns:x}-{size:x}"'


def http_date(timestamp: float) -> str:
    """Format a POSIX timestamp as an HTTP date."""
    return formatdate(timestamp, usegmt=True)


def _opaque_tag(tag: str) -> str:
    tag = tag.strip()
    if tag.startswith("W/"):
        return tag[2:]
    return tag


def is_not_modified(headers: Mapping[str, str], etag: str, mtime: float) -> bool:
    """Evaluate If-None-Match and If-Modified-Since against a file.

    If-None-Match takes precedence and uses weak comparison. The date is
    only consulted when no entity tags were sent.

    Args:
        headers: Request headers (case-insensitive lookup).
        etag: Current entity tag of the file.
        mtime: Current modification time of the file.

    Returns:
        True if the client's cached copy is still current.
    """
    if_none_match = headers.get("if-none-match")
    if if_none_match is not None:
        candidates = {_opaque_tag(tag) for tag in if_none_match.split(",")}
        return "*" in candidates or _opaque_tag(etag) in candidates

    if_modified_since = headers.get("if-modified-since")
    if if_modified_since is None:
        return False
    try:
        since = parsedate_to_datetime(if_modified_since).timestamp()
    except (TypeError, ValueError, OverflowError):
        return False
    return int(mtime) <= int(since)


def range_applies(headers: Mapping[str, str], etag: str, last_modified: str) -> bool:
    """Check If-Range so a stale partial request gets the full file.

    Args:
        headers: Request headers (case-insensitive lookup).
        etag: Current entity tag of the file.
        last_modified: Current Last-Modified value of the file.

    Returns:
        True if the Range header may be honored.
    """
    if_range = headers.get("if-range")
    if if_range is None:
        return True
    if_range = if_range.strip()
    return if_range == etag or if_range == last_modified


def parse_range(header: str | None, size: int) -> ByteRange | None:
    """Parse a single ``bytes=`` range against the file size.

    Malformed headers, other units and multi-range requests are ignored
    so the caller serves the whole file.

    Args:
        header: Value of the Range header, if any.
        size: File size in bytes.

    Returns:
        The requested span clamped to the file, or None for the full file.

    Raises:
        RangeNotSatisfiableError: If the range starts past the end of the
            file or asks for an empty suffix.
    """
    if header is None:
        return None
    match = SINGLE_RANGE.match(header)
    if match is None:
        return None

    first, last = match.groups()
    if not first and not last:
        return None

    if not first:
        suffix = int(last)
        if suffix == 0 or size == 0:
            raise RangeNotSatisfiableError(size)
        return ByteRange(max(size - suffix, 0), size - 1)

    start = int(first)
    end = int(last) if last else size - 1
    if last and end < start:
        return None
    if start >= size:
        raise RangeNotSatisfiableError(size)
    return ByteRange(start, min(end, size - 1))
