"""
Runtime configuration for TrailGate.

Values come from TRAILGATE_* environment variables (or a .env file in the
working directory) with the defaults below.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_COMPLETION_THRESHOLD = 80.0  # percent watched before a video step is complete
DEFAULT_SAMPLE_INTERVAL = 1.0        # seconds between watch-time samples
DEFAULT_SUGGESTED_TIP = 25.0
DEFAULT_TRAILS_DIR = Path("trails")
DEFAULT_PROGRESS_DIR = Path.home() / ".trailgate"
DEFAULT_PROGRESS_DB = DEFAULT_PROGRESS_DIR / "progress.db"


class Settings(BaseSettings):
    """
    Engine settings.

    Each field is read from TRAILGATE_<FIELD_NAME>, e.g.
    TRAILGATE_COMPLETION_THRESHOLD or TRAILGATE_DEFAULT_TIP.
    """
    model_config = SettingsConfigDict(
        env_prefix="TRAILGATE_", env_file=".env", extra="ignore"
    )

    completion_threshold: float = Field(DEFAULT_COMPLETION_THRESHOLD, gt=0, le=100)
    sample_interval: float = Field(DEFAULT_SAMPLE_INTERVAL, gt=0)
    default_tip: float = Field(DEFAULT_SUGGESTED_TIP, ge=0)
    trails_dir: Path = DEFAULT_TRAILS_DIR
    progress_db: Path = DEFAULT_PROGRESS_DB
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings."""
    return Settings()
