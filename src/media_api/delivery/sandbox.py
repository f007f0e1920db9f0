"""Confinement of resolved paths to the configured static root."""
from dataclasses import dataclass
from pathlib import Path

from media_api.delivery.errors import AssetNotFoundError, InvalidPathError


@dataclass(frozen=True)
class StaticRoot:
    """Canonical directory that every delivered file must live under.

    Attributes:
        path: Absolute, fully resolved directory path.
    """

    path: Path

    @classmethod
    def from_config(cls, value: str | Path) -> "StaticRoot":
        """Build a static root from a configured value.

        Args:
            value: Absolute directory path.

        Returns:
            StaticRoot with symlinks and relative segments resolved.

        Raises:
            ValueError: If the value is empty or relative.
        """
        text = str(value).strip()
        if not text:
            raise ValueError("Static root must not be empty")
        path = Path(text)
        if not path.is_absolute():
            raise ValueError(f"Static root must be absolute: {text}")
        return cls(path.resolve())

    def contains(self, candidate: Path) -> bool:
        """Check whether a canonical path is the root or beneath it.

        Compares path components, so ``/data`` never contains ``/database``.

        Args:
            candidate: Canonical path to test.

        Returns:
            True if the candidate is inside the root.
        """
        return candidate.is_relative_to(self.path)


def resolve_within(root: StaticRoot, relative: str) -> Path:
    """Resolve a relative request path to a regular file inside the root.

    Performs the final containment check against the canonical path, so a
    traversal that slipped past the signature scan, or a symlink pointing
    outside the root, is still refused.

    Args:
        root: The static root.
        relative: Path relative to the root.

    Returns:
        Canonical path of an existing regular file.

    Raises:
        InvalidPathError: If the canonical path escapes the root.
        AssetNotFoundError: If nothing readable exists at the path.
    """
    try:
        resolved = (root.path / relative.lstrip("/")).resolve()
    except (OSError, RuntimeError) as e:
        raise AssetNotFoundError(f"resolve failed: {e}", relative) from e

    if not root.contains(resolved):
        raise InvalidPathError("resolves outside static root", relative)

    try:
        is_file = resolved.is_file()
    except OSError as e:
        raise AssetNotFoundError(f"stat failed: {e}", relative) from e

    if not is_file:
        raise AssetNotFoundError("no regular file at path", relative)

    return resolved
