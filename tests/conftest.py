import os
import pytest


# List of environment variables that may be modified by tests
_ENV_VARS_TO_ISOLATE = [
    "LOG_LEVEL",
    "LOG_JSON",
    "NOMINAL_THRESHOLD_MM",
    "MEASUREMENT_MAX_MM",
    "TOLERANCE_TABLE_PATH",
]


@pytest.fixture(autouse=True)
def env_isolation():
    """Isolate environment variables between tests."""
    backup = {k: os.environ.get(k) for k in _ENV_VARS_TO_ISOLATE}
    try:
        yield
    finally:
        for k, v in backup.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v


@pytest.fixture(autouse=True)
def settings_isolation():
    """Drop cached settings and the cached reference table around each test."""
    from src.core.config import reset_settings
    from src.core.knowledge.tolerance.table import reset_default_table

    reset_settings()
    reset_default_table()
    try:
        yield
    finally:
        reset_settings()
        reset_default_table()
