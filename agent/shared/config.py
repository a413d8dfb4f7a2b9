"""Configuration management using Pydantic Settings."""

from __future__ import annotations

import json
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_list(v: object) -> list[str]:
    """Parse a list from either a JSON array string, comma-separated string, or list."""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        v = v.strip()
        if not v:
            return []
        if v.startswith("["):
            return json.loads(v)
        return [item.strip() for item in v.split(",") if item.strip()]
    return list(v)  # type: ignore[arg-type]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Remote transcription (OpenAI-compatible API)
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_transcription_model: str = "whisper-1"

    # Local backends
    whisper_command: str = "faster-whisper"
    whisper_default_model: str = "distil-large-v3.5"
    ytdlp_command: str = "yt-dlp"

    # Output locations (relative paths resolve against the working directory)
    downloads_dir: str = "downloads"
    transcripts_dir: str = "downloads/transcripts"

    # Timeouts (seconds)
    probe_timeout: float = 10.0
    download_timeout: int = 1800
    transcribe_timeout: int = 1800
    http_timeout: float = 30.0

    # Inter-service auth token (empty disables auth, dev mode)
    service_auth_token: str = ""

    # Remote tool modules to discover (set via JSON in .env), e.g.
    # {"youtube_download": "http://youtube-download:8000"}
    module_services: dict[str, str] = {}

    # Backend diagnostics that mark a failure as transient.
    # Stored as str: comma-separated or JSON array. Use parse_list() at the point of use.
    transient_error_patterns: str = "Video unavailable,HTTP Error 429"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def is_transient(self, message: str | None) -> bool:
        """Whether a backend diagnostic matches the transient-error policy."""
        if not message:
            return False
        lowered = message.lower()
        return any(p.lower() in lowered for p in parse_list(self.transient_error_patterns))


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
