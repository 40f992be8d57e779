"""JSON logging setup."""

import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from twofa.core.config import settings


class JsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record.pop("asctime", None)


def setup_logging() -> None:
    """Send every log record to stdout as one JSON object per line."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter("%(timestamp)s %(level)s %(logger)s %(message)s",
                                       datefmt="%Y-%m-%dT%H:%M:%S"))
    root_logger.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    # los drivers loguean los parámetros de cada query en DEBUG
    for name in ("aiosqlite", "aiomysql"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
