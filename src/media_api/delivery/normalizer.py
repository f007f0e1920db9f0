"""Expansion of a request path into every string form that must be inspected."""
import re
from dataclasses import dataclass
from urllib.parse import unquote

from media_api.delivery.errors import InvalidPathError

MALFORMED_ESCAPE = re.compile(r"%(?![0-9a-fA-F]{2})")


@dataclass(frozen=True)
class RequestPath:
    """Path portion of a request, relative to the mount prefix.

    Attributes:
        raw: Path exactly as received on the wire, percent-encoding intact.
        normalized: Path after the framework decoded it.
    """

    raw: str
    normalized: str

    @property
    def relative(self) -> str:
        """Normalized path with leading separators removed."""
        return self.normalized.lstrip("/")


def decode_once(value: str) -> str:
    """Percent-decode a string exactly one level.

    Args:
        value: Possibly percent-encoded string.

    Returns:
        The decoded string.

    Raises:
        InvalidPathError: If an escape is malformed or the decoded bytes
            are not valid UTF-8.
    """
    if MALFORMED_ESCAPE.search(value):
        raise InvalidPathError("malformed percent escape", value)
    try:
        return unquote(value, encoding="utf-8", errors="strict")
    except UnicodeDecodeError as e:
        raise InvalidPathError("percent escape is not valid utf-8", value) from e


def expand_forms(request_path: RequestPath) -> list[str]:
    """List the distinct representations of a request path.

    Order is raw, normalized (when it differs), then the single decode of
    the raw form. The normalized form is already decoded and is scanned as
    is, so a literal ``%`` in a filename is not read as an escape. Nested
    encodings are never unwound further; the detector looks for encoded
    fragments that survive one pass instead.

    Args:
        request_path: Raw and normalized forms of the request path.

    Returns:
        Ordered list of unique strings to scan.

    Raises:
        InvalidPathError: If the raw form fails to decode.
    """
    bases = [request_path.raw, request_path.normalized]
    forms: list[str] = []
    for base in bases:
        if base not in forms:
            forms.append(base)
    decoded = decode_once(request_path.raw)
    if decoded not in forms:
        forms.append(decoded)
    return forms
