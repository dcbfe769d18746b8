from __future__ import annotations

import logging
import logging.config
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from valuninja.core.context import get_request_id, get_scout_region, get_scout_step

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s %(scout_step)s %(scout_region)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"


class ScoutContextFilter(logging.Filter):
    """Stamps the request id plus the active scout step and region onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        record.scout_step = get_scout_step() or "-"
        record.scout_region = get_scout_region() or "-"
        return True


def _build_logging_config(level: str) -> Dict[str, Any]:
    handler = {"handlers": ["default"], "level": level, "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "scout_context": {
                "()": ScoutContextFilter,
            }
        },
        "formatters": {
            "json": {
                "()": jsonlogger.JsonFormatter,
                "fmt": LOG_FORMAT,
                "datefmt": LOG_DATEFMT,
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "filters": ["scout_context"],
            }
        },
        "loggers": {
            "uvicorn": dict(handler),
            "uvicorn.error": dict(handler),
            "uvicorn.access": dict(handler),
            "valuninja": dict(handler),
        },
        "root": {"handlers": ["default"], "level": "WARNING"},
    }


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(_build_logging_config(level.upper()))
