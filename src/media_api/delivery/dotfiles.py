"""Hidden file and directory rejection."""
from media_api.delivery.errors import DotfileAccessDeniedError


def is_hidden_segment(segment: str) -> bool:
    """Check if a single path segment names a hidden entry.

    ``.`` and ``..`` are traversal tokens, not dotfiles.

    Args:
        segment: One component of a path.

    Returns:
        True if the segment is a dotfile name.
    """
    return segment.startswith(".") and segment not in (".", "..") and len(segment) > 1


def check_dotfile(path: str) -> None:
    """Reject a validated path whose basename or parent segments are hidden.

    Args:
        path: Path relative to the static root, already past the
            traversal scan.

    Raises:
        DotfileAccessDeniedError: If the basename or any directory segment
            is hidden.
    """
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return

    if is_hidden_segment(segments[-1]):
        raise DotfileAccessDeniedError("hidden file", path)

    for segment in segments[:-1]:
        if is_hidden_segment(segment):
            raise DotfileAccessDeniedError("hidden directory", path)
