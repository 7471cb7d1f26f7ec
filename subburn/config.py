"""Application configuration loaded from environment variables."""

from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # HTTP service
    port: int = 4000
    api_base_url: str = "http://localhost:4000"
    frontend_origin: str = "http://localhost:3000"

    # Job queue
    queue_concurrency: int = 2

    # Upload limits
    max_duration_sec: float = 300
    max_upload_size_mb: float = 300

    # Providers
    asr_provider: Literal["mock", "openai"] = "mock"
    translation_provider: Literal["mock", "openai"] = "mock"
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_asr_model: str = "gpt-4o-mini-transcribe"
    openai_translation_model: str = "gpt-4o-mini"
    request_timeout_sec: float = 120.0

    # Storage and external programs
    storage_dir: Path = Path("storage")
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get global settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
