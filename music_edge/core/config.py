"""Application configuration utilities."""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

from music_edge.core.logging_config import DEFAULT_LOG_FORMAT


class Settings(BaseSettings):
    """Centralized runtime settings sourced from environment variables."""

    password: Optional[str] = Field(None, alias="MUSIC_EDGE_PASSWORD")
    log_level: str = Field("INFO", alias="MUSIC_EDGE_LOG_LEVEL")
    log_format: str = Field(DEFAULT_LOG_FORMAT, alias="MUSIC_EDGE_LOG_FORMAT")
    quiet_loggers: list[str] = Field(["httpx", "httpcore"], alias="MUSIC_EDGE_QUIET_LOGGERS")

    api_base_url: str = Field("https://music-api.gdstudio.xyz/api.php", alias="MUSIC_EDGE_API_BASE_URL")
    audio_allowed_domain: str = Field("kuwo.cn", alias="MUSIC_EDGE_AUDIO_DOMAIN")
    upstream_timeout_seconds: float = Field(30.0, alias="MUSIC_EDGE_UPSTREAM_TIMEOUT")

    storage_path: Optional[str] = Field(None, alias="MUSIC_EDGE_STORAGE_PATH")
    static_dir: Optional[str] = Field(None, alias="MUSIC_EDGE_STATIC_DIR")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        populate_by_name = True


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance to avoid repeated parsing."""
    return Settings()
