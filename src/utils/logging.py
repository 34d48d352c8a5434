"""Structured logging setup for tolerance evaluation."""

import json
import logging
import sys
from typing import Optional

from src.core.config import get_settings


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        data = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }
        # Common structured fields emitted by the evaluators
        for attr in [
            "material_type",
            "designation",
            "nominal",
            "measurement",
            "measurement_count",
            "error_code",
            "stage",
        ]:
            if hasattr(record, attr):
                data[attr] = getattr(record, attr)
        return json.dumps(data, ensure_ascii=False)


def setup_logging(level: Optional[str] = None) -> None:
    settings = get_settings()
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())
    handler = logging.StreamHandler(sys.stdout)
    if settings.LOG_JSON:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.handlers = [handler]
