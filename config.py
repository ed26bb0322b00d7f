"""
Application configuration loaded from environment variables.
"""
from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PHOTOSYNTH_URL = "https://ps.temperal.co/ps"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # PhotoSynth endpoint
    photosynth_key: Optional[str] = None  # default key when a request carries none
    photosynth_url: str = DEFAULT_PHOTOSYNTH_URL

    # "query" -> ?u=..&k=..&w=..   "path" -> /u=..,k=..,w=..
    photosynth_separator: Literal["query", "path"] = "query"

    # Feature flags
    photosynth_rotate_enabled: bool = True
    photosynth_bypass_enabled: bool = True
    photosynth_cache_bust_enabled: bool = True

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
