"""API configuration loaded from environment variables."""
from pathlib import Path

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """API configuration loaded from environment variables.

    Attributes:
        host: Bind address for the API server.
        port: Port number for the API server.
        debug: Enable debug mode and API documentation.
        cors_origins_raw: Raw comma-separated CORS origins string.
        static_root: Absolute directory that uploaded media is served from.
        mount_prefix: URL prefix the media route is mounted under.
        cache_max_age: Seconds browsers may cache a delivered file.
        chunk_size: Bytes read per iteration when streaming a file.
    """

    model_config = SettingsConfigDict(
        env_prefix="MEDIA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    cors_origins_raw: str = "http://localhost:3000"

    static_root: Path = Path("/srv/media/uploads")
    mount_prefix: str = "/uploads"
    cache_max_age: int = Field(default=86400, ge=0)
    chunk_size: int = Field(default=64 * 1024, gt=0)

    @field_validator("static_root", mode="before")
    @classmethod
    def _require_absolute_root(cls, value: object) -> Path:
        """Reject empty or relative roots and canonicalize the rest.

        Args:
            value: Raw configured value.

        Returns:
            Canonical absolute path.

        Raises:
            ValueError: If the value is empty or relative.
        """
        text = str(value).strip() if value is not None else ""
        if not text:
            raise ValueError("static_root must not be empty")
        path = Path(text)
        if not path.is_absolute():
            raise ValueError(f"static_root must be absolute, got {text!r}")
        return path.resolve()

    @field_validator("mount_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        """Normalize the prefix to one leading slash and no trailing slash."""
        stripped = value.strip().strip("/")
        if not stripped:
            raise ValueError("mount_prefix must not be empty")
        return f"/{stripped}"

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string.

        Returns:
            List of allowed origin URLs.
        """
        return [
            origin.strip()
            for origin in self.cors_origins_raw.split(",")
            if origin.strip()
        ]
