"""Structured logging setup."""

import json
import logging
import sys
from pathlib import Path
from typing import Any

from connection_factory.config.settings import Settings, settings

TEXT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Fields passed as logger.info(..., extra={"extra": {...}})
        if hasattr(record, "extra") and isinstance(record.extra, dict):
            log_data.update(record.extra)

        return json.dumps(log_data, ensure_ascii=False)


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT)


def setup_logging(app_settings: Settings | None = None) -> None:
    """Configure the root logger.

    Args:
        app_settings: Settings to apply. Defaults to the global settings.
    """
    app_settings = app_settings or settings

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, app_settings.log_level.upper(), logging.INFO))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(_build_formatter(app_settings.log_format))
    root_logger.addHandler(console_handler)

    if app_settings.log_file:
        log_file_path = Path(app_settings.log_file)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(_build_formatter(app_settings.log_format))
        root_logger.addHandler(file_handler)
