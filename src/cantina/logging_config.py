"""Logging setup for the command line application."""

import logging
import sys
from datetime import datetime
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class CustomJsonFormatter(JsonFormatter):
    """JSON formatter with local timestamp, level and application name."""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.fromtimestamp(record.created).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "cantina"


class StderrHandler(logging.StreamHandler):
    """Stream handler that writes to whatever sys.stderr is at emit time."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


_handler: logging.Handler | None = None


def setup_logging(level: str = "WARNING", json_format: bool = False) -> None:
    """Configure the cantina logger.

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: Level name such as "INFO" or "DEBUG"
        json_format: Emit one JSON object per record instead of plain text
    """
    global _handler

    logger = logging.getLogger("cantina")
    logger.setLevel(level.upper())

    if _handler is not None:
        logger.removeHandler(_handler)

    handler = StderrHandler()
    if json_format:
        handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    logger.addHandler(handler)
    _handler = handler
