"""Settings validation tests."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from media_api.config import Settings


def test_static_root_is_canonicalized(static_root: Path) -> None:
    """The static root is stored in resolved form."""
    settings = Settings(static_root=f"{static_root}/albums/../")
    assert settings.static_root == static_root.resolve()


@pytest.mark.parametrize("value", ["", "uploads", "./uploads"])
def test_static_root_must_be_absolute(value: str) -> None:
    """Empty and relative static roots fail validation."""
    with pytest.raises(ValidationError):
        Settings(static_root=value)


def test_static_root_read_from_environment(static_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """MEDIA_STATIC_ROOT configures the static root."""
    monkeypatch.setenv("MEDIA_STATIC_ROOT", str(static_root))
    assert Settings().static_root == static_root.resolve()


@pytest.mark.parametrize(
    ("value", "expected"),
    [("/uploads", "/uploads"), ("uploads/", "/uploads"), ("//media//", "/media")],
)
def test_mount_prefix_normalized(value: str, expected: str) -> None:
    """The prefix always has exactly one leading slash."""
    assert Settings(mount_prefix=value).mount_prefix == expected


def test_mount_prefix_must_not_be_empty() -> None:
    """A bare slash is not a usable prefix."""
    with pytest.raises(ValidationError):
        Settings(mount_prefix="/")


def test_cors_origins_parsed() -> None:
    """Comma-separated origins are split and blanks dropped."""
    settings = Settings(cors_origins_raw="https://a.example, https://b.example,")
    assert settings.cors_origins == ["https://a.example", "https://b.example"]


def test_non_positive_chunk_size_rejected() -> None:
    """A zero chunk size fails validation."""
    with pytest.raises(ValidationError):
        Settings(chunk_size=0)
