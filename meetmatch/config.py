# meetmatch/config.py
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    ENV: str = "dev"
    APP_NAME: str = "Meetmatch Scheduler"

    # DB URL – SQLite local by default
    DATABASE_URL: str = "sqlite:///./meetmatch.db"

    LOG_LEVEL: str = "INFO"

    # Calendar whose local time all slots are computed in. Datetimes that
    # carry a UTC offset are converted to this zone, then made naive.
    REFERENCE_TIMEZONE: str = "UTC"

    # Daily window used when a request does not give one ("HH:MM")
    DEFAULT_WINDOW_START: str = "09:00"
    DEFAULT_WINDOW_END: str = "22:00"

    DEFAULT_DURATION_MINUTES: int = 60
    DEFAULT_MAX_SUGGESTIONS: int = 5

    # Bounds accepted by the API for a meeting duration
    MIN_DURATION_MINUTES: int = 15
    MAX_DURATION_MINUTES: int = 240

    # Candidate scan resolution vs. display grid resolution
    CANDIDATE_STEP_MINUTES: int = 15
    DISPLAY_GRID_MINUTES: int = 30

    # Shortest free run worth highlighting
    MIN_FREE_SLOT_MINUTES: int = 30

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

_settings: Optional[Settings] = None

def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
