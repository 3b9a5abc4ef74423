"""Application configuration using pydantic-settings."""

import warnings
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


# Sentinel value that indicates the fallback PIN was never changed
_UNCONFIGURED_PIN = "007"

# Find .env file: check backend dir first, then project root
_BACKEND_DIR = Path(__file__).parent.parent
_PROJECT_ROOT = _BACKEND_DIR.parent
_ENV_FILE = _BACKEND_DIR / ".env" if (_BACKEND_DIR / ".env").exists() else _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    The access PIN stored in the clinic settings record always wins; the
    value configured here is only the fallback used while the record carries
    no PIN of its own.
    """

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Local SQLite database file
    database_url: str = "sqlite+aiosqlite:///./prontuario.db"

    # Destructive actions (delete, wipe, import)
    default_access_pin: str = _UNCONFIGURED_PIN

    # Documents and alerts
    display_timezone: str = "America/Sao_Paulo"
    stale_record_days: int = 180

    # Local HTTP surface
    cors_origins: str = "http://localhost:8000,http://127.0.0.1:8000"

    # Application
    debug: bool = False

    def model_post_init(self, __context) -> None:
        """Warn about unconfigured credentials."""
        if self.default_access_pin == _UNCONFIGURED_PIN:
            warnings.warn(
                "DEFAULT_ACCESS_PIN not configured! Set DEFAULT_ACCESS_PIN or save a PIN in the clinic settings.",
                UserWarning,
                stacklevel=2,
            )


settings = Settings()
