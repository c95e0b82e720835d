"""Application configuration using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ConfigurationError(Exception):
    """A required setting or credential is missing or unreadable."""


class Settings(BaseSettings):
    """Application settings, configurable via environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Path("data")

    # Logging
    log_level: LogLevel = "INFO"
    log_file_enabled: bool = False
    log_file_path: Path | None = None
    log_file_max_bytes: int = 10 * 1024 * 1024  # 10 MB
    log_file_backup_count: int = 5

    @property
    def resolved_log_file_path(self) -> Path:
        """Return log file path, defaulting to data_dir/wordimport.log if not set."""
        return self.log_file_path or self.data_dir / "wordimport.log"

    @property
    def cache_dir(self) -> Path:
        return self.data_dir / "words"

    # HTTP
    http_timeout: float = 30.0
    max_request_attempts: int = 3

    # Readwise
    readwise_url: str = "https://readwise.io/api/v2"
    readwise_token: str = ""
    readwise_tag: str = "pink"

    # Oxford Dictionaries
    oxford_url: str = "https://od-api.oxforddictionaries.com/api/v2"
    oxford_app_id: str = ""
    oxford_app_key: str = ""
    max_lead_depth: int = 5

    # Google Cloud Translation
    google_credentials_file: Path | None = None
    translate_source: str = "en"
    translate_target: str = "ru"

    # AnkiConnect
    anki_connect_url: str = "http://localhost:8765"
    anki_note_type: str = "Basic"


settings = Settings()
