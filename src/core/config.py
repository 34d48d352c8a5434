"""Runtime settings for tolerance evaluation.

Values can be overridden through environment variables or a ``.env`` file.
"""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Overshoot/undershoot (mm) past which a measurement moves to the next nominal
    NOMINAL_THRESHOLD_MM: float = 0.9
    # Measurements must satisfy 0 <= value < MEASUREMENT_MAX_MM
    MEASUREMENT_MAX_MM: float = 1000.0

    # Optional JSON file replacing the shipped reference table
    TOLERANCE_TABLE_PATH: Optional[str] = None

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }


_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = Settings()
    return _settings_cache


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings_cache
    _settings_cache = None
