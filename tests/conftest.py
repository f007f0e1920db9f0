"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from fastapi.testclient import TestClient

from media_api.app import create_app
from media_api.config import Settings
from media_api.delivery import AssetPipeline, StaticRoot

PHOTO_BYTES = b"\xff\xd8\xff\xe0" + b"\x00JFIF" + bytes(range(256)) * 4
PDF_BYTES = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\n%%EOF\n"
CLIP_BYTES = b"\x00\x00\x00\x18ftypmp42" + bytes(range(32))


@pytest.fixture
def static_root(tmp_path: Path) -> Path:
    """Create an uploads directory with sample media and sensitive neighbours.

    Layout::

        uploads/
            photo.jpg, report.pdf, clip.mp4, data.json, archive.bin,
            my.file.with.dots.txt, .env, albums/2024/cover.png, .git/config
        uploads-private/secret.txt
        outside.txt
    """
    root = tmp_path / "uploads"
    root.mkdir()
    (root / "photo.jpg").write_bytes(PHOTO_BYTES)
    (root / "report.pdf").write_bytes(PDF_BYTES)
    (root / "clip.mp4").write_bytes(CLIP_BYTES)
    (root / "data.json").write_text('{"ok": true}', encoding="utf-8")
    (root / "archive.bin").write_bytes(b"\x01\x02\x03")
    (root / "my.file.with.dots.txt").write_text("dots", encoding="utf-8")
    (root / ".env").write_text("SECRET_KEY=hunter2\n", encoding="utf-8")

    albums = root / "albums" / "2024"
    albums.mkdir(parents=True)
    (albums / "cover.png").write_bytes(b"\x89PNG\r\n\x1a\n")

    git_dir = root / ".git"
    git_dir.mkdir()
    (git_dir / "config").write_text("[core]\n", encoding="utf-8")

    sibling = tmp_path / "uploads-private"
    sibling.mkdir()
    (sibling / "secret.txt").write_text("sibling secret", encoding="utf-8")

    (tmp_path / "outside.txt").write_text("outside secret", encoding="utf-8")
    return root


@pytest.fixture
def settings(static_root: Path) -> Settings:
    """Create test settings."""
    return Settings(
        host="127.0.0.1",
        port=8000,
        debug=True,
        static_root=static_root,
    )


@pytest.fixture
def client(settings: Settings) -> TestClient:
    """Create test client with configured app."""
    app = create_app(settings)
    return TestClient(app)


@pytest.fixture
def pipeline(static_root: Path) -> AssetPipeline:
    """Create a pipeline over the sample static root."""
    return AssetPipeline(StaticRoot.from_config(static_root))
