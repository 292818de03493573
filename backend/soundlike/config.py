"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box locally
    - SMTP left blank by default: mail transport becomes a logged no-op
"""

from functools import lru_cache
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from soundlike.core.domain_types import AudioFormat
from soundlike.core.enforce_upload import DEFAULT_MAX_UPLOAD_BYTES


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database — one SQLite file in WAL mode
    database_url: str = "sqlite+aiosqlite:///./data/soundlike.db"
    database_pool_size: int = 20
    database_max_overflow: int = 10
    database_busy_timeout_seconds: float = 30.0
    database_auto_create: bool = True

    # Blob store
    uploads_dir: str = "uploads"
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    allowed_audio_extensions: Annotated[list[str], NoDecode] = [
        fmt.value for fmt in AudioFormat
    ]

    # Identity provider (credentials via GOOGLE_APPLICATION_CREDENTIALS)
    firebase_project_id: str | None = None

    # Mail
    smtp_host: str = ""
    smtp_port: int | None = None
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from: str = ""
    frontend_url: str = "http://localhost:3000"

    # Notification fanout
    notification_workers: int = 4
    notification_queue_size: int = 1000

    # API
    cors_origins: Annotated[list[str], NoDecode] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("cors_origins", "allowed_audio_extensions", mode="before")
    @classmethod
    def split_comma_list(cls, v):
        """ALLOWED_ORIGINS-style comma-separated env values."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("allowed_audio_extensions")
    @classmethod
    def check_known_extensions(cls, v: list[str]) -> list[str]:
        known = {fmt.value for fmt in AudioFormat}
        normalized = [e.lower() if e.startswith(".") else f".{e.lower()}" for e in v]
        unknown = sorted(set(normalized) - known)
        if unknown:
            raise ValueError(f"unsupported audio extensions: {unknown}")
        return normalized

    @property
    def allowed_audio_formats(self) -> frozenset[AudioFormat]:
        return frozenset(AudioFormat(ext) for ext in self.allowed_audio_extensions)


@lru_cache
def get_settings() -> Settings:
    return Settings()
