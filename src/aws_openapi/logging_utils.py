"""Logging setup for conversion runs.

Converter modules log through ``logging.getLogger(__name__)``; the entry
points call ``get_logger`` so that a process which never configured logging
still gets the converter's handlers the first time a document is converted.
"""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path

from aws_openapi.config import load_settings

_logging_configured = False
_logging_lock = threading.Lock()

_logger = logging.getLogger(__name__)

_FORMATTER = logging.Formatter(
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)

# Endpoint data loading in botocore is chatty at DEBUG.
_QUIET_LOGGERS = ("botocore",)


def _handler(handler: logging.Handler) -> logging.Handler:
    handler.setFormatter(_FORMATTER)
    return handler


def configure_logging(level: str | None = None) -> None:
    """Install stderr (and optional file) handlers on the root logger.

    ``level`` overrides the configured ``LOG_LEVEL`` for this process.
    """
    global _logging_configured

    settings = load_settings()
    level_name = (level or settings.logging.level).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)

    handlers = [_handler(logging.StreamHandler(sys.stderr))]
    if settings.logging.file:
        try:
            Path(settings.logging.file).parent.mkdir(parents=True, exist_ok=True)
            handlers.append(_handler(logging.FileHandler(settings.logging.file)))
        except OSError as exc:
            _logger.warning("Failed to open log file %s: %s", settings.logging.file, exc)

    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    if not _logging_configured:
        with _logging_lock:
            if not _logging_configured:
                configure_logging()
    return logging.getLogger(name)
