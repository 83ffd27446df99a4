from typing import Literal

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings sourced from environment variables."""

    API_BASE_URL: str = "http://localhost:3333"
    REDIS_URL: str = "redis://localhost:6379/0"

    # Local storage key that holds the logged-in user's id
    USER_STORAGE_KEY: str = "user"

    BOOKING_WINDOW_MONTHS: int = 3
    DISPLAY_DATE_FORMAT: str = "%d/%m/%Y"  # e.g. 05/11/2026
    REQUEST_TIMEOUT_SECONDS: float = 10.0

    # Picker behaviour differs per platform: iOS keeps the spinner open after a pick
    PLATFORM: Literal["android", "ios"] = "android"
    TIMEZONE: str | None = None  # IANA name, e.g. "America/Sao_Paulo"; local time when unset

    LOG_LEVEL: str = "INFO"

    model_config = ConfigDict(env_file=".env", extra="ignore")


settings = Settings()
