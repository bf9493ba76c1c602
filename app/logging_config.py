"""Root logger setup — JSON lines on stdout."""

from __future__ import annotations

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

from app.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(level: str | None = None, json_output: bool | None = None) -> logging.Logger:
    logger = logging.getLogger()
    logger.setLevel((level or settings.log_level).upper())

    use_json = settings.log_json if json_output is None else json_output
    formatter: logging.Formatter
    if use_json:
        formatter = JsonFormatter(LOG_FORMAT)
    else:
        formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)

    if logger.hasHandlers():
        logger.handlers.clear()
    logger.addHandler(console)

    # quiet noisy libs
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger.info("Logging initialized", extra={"json": use_json})
    return logger
