from __future__ import annotations

import logging
import os
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
JSON_FIELDS = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(
        level: Optional[int | str] = None,
        force_format: Optional[str] = None,
) -> None:
    """
    Configure root logger for the app

    Modes:
    - JSON (default): one object per line, `extra={...}` keys become fields
    - plain text (dev mode)

    Selection Order:
        1) arguments, if provided
        2) env vars STUDENT_BROWSER_LOG_FORMAT / STUDENT_BROWSER_LOG_LEVEL
        3) defaults: "json", INFO
    """
    format_mode = (force_format or os.getenv("STUDENT_BROWSER_LOG_FORMAT", "json")).lower()

    if level is None:
        level = os.getenv("STUDENT_BROWSER_LOG_LEVEL", "INFO").upper()

    logger = logging.getLogger()
    logger.setLevel(level)

    handler = logging.StreamHandler()

    if format_mode == "plain":
        formatter = logging.Formatter(PLAIN_FORMAT)
    else:
        formatter = JsonFormatter(JSON_FIELDS)

    handler.setFormatter(formatter)

    # Replace any existing handlers to avoid duplicate logs
    logger.handlers.clear()
    logger.addHandler(handler)

    # Dash's dev server logs every callback request at INFO
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
