from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUMMARY_LANGUAGES: tuple[str, ...] = ("en", "ru")


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    data_dir: Path = Field(default_factory=lambda: Path.home() / ".ytscribe")
    exports_dir: Path | None = None
    db_filename: str = "ytscribe.db"

    transcript_service_url: str = "https://web-production-8d29a.up.railway.app"
    transcript_language: str = "en"
    request_timeout_s: float = 60.0

    openai_api_key: str | None = None
    completion_model: str = "gpt-4-turbo-preview"

    segment_max_duration_s: float = Field(default=30.0, gt=0)

    summary_temperature: float = 0.7
    summary_max_tokens: int = 1000
    search_temperature: float = 0.3
    search_max_tokens: int = 500
    search_max_matches: int = 3
    chat_temperature: float = 0.7
    chat_max_tokens: int = 500

    log_level: str = "WARNING"

    model_config = SettingsConfigDict(env_prefix="YTSCRIBE_", extra="ignore")

    @model_validator(mode="after")
    def _derive_paths(self) -> "Settings":
        if "exports_dir" not in self.model_fields_set or self.exports_dir is None:
            self.exports_dir = self.data_dir / "exports"
        return self

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_filename

    def ensure_dirs(self) -> None:
        for path in (self.data_dir, self.exports_dir):
            path.mkdir(parents=True, exist_ok=True)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
