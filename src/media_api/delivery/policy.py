"""Disposition and security header policy for delivered files."""
import mimetypes
from enum import Enum
from pathlib import PurePosixPath


class Disposition(str, Enum):
    """How a browser should present a delivered file."""

    INLINE = "inline"
    ATTACHMENT = "attachment"


IMAGE_EXTENSIONS: frozenset[str] = frozenset({
    ".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".avif", ".bmp", ".ico",
})

VIDEO_EXTENSIONS: frozenset[str] = frozenset({
    ".mp4", ".webm", ".mov", ".avi", ".m4v", ".ogv",
})

AUDIO_EXTENSIONS: frozenset[str] = frozenset({
    ".mp3", ".wav", ".ogg", ".m4a", ".aac", ".flac", ".oga",
})

INLINE_DOCUMENT_EXTENSIONS: frozenset[str] = frozenset({
    ".json", ".txt",
})

DISPOSITIONS: dict[str, Disposition] = {
    ext: Disposition.INLINE
    for ext in IMAGE_EXTENSIONS | VIDEO_EXTENSIONS | AUDIO_EXTENSIONS | INLINE_DOCUMENT_EXTENSIONS
}

CONTENT_SECURITY_POLICY = "default-src 'none'; img-src 'self'; media-src 'self'"
DEFAULT_MEDIA_TYPE = "application/octet-stream"


def extension_of(filename: str) -> str:
    """Return the lower-cased extension of a filename, including the dot.

    Args:
        filename: File name or relative path.

    Returns:
        Extension such as ``.jpg``, or an empty string.
    """
    return PurePosixPath(filename).suffix.lower()


def classify(filename: str) -> Disposition:
    """Map a filename to its content disposition.

    Unknown extensions are never rendered inline.

    Args:
        filename: File name or relative path.

    Returns:
        INLINE for whitelisted media and documents, ATTACHMENT otherwise.
    """
    return DISPOSITIONS.get(extension_of(filename), Disposition.ATTACHMENT)


def media_type(filename: str) -> str:
    """Guess the Content-Type for a filename.

    Args:
        filename: File name or relative path.

    Returns:
        MIME type, or ``application/octet-stream`` when unknown.
    """
    guessed, _ = mimetypes.guess_type(filename, strict=False)
    return guessed or DEFAULT_MEDIA_TYPE


def security_headers(disposition: Disposition, max_age: int = 86400) -> dict[str, str]:
    """Build the headers attached to every successful delivery.

    Args:
        disposition: Disposition computed by ``classify``.
        max_age: Cache lifetime in seconds.

    Returns:
        Header name to value mapping.
    """
    return {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "SAMEORIGIN",
        "Content-Security-Policy": CONTENT_SECURITY_POLICY,
        "Cache-Control": f"public, max-age={max_age}",
        "Content-Disposition": disposition.value,
    }
