"""Logging configuration for the importer.

The importer runs unattended from a scheduler, so by default it logs to a
rotating file. Every module gets its logger through :func:`get_logger` with an
``efe.<area>`` name; this module is the only place that touches handlers.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Iterable, Literal

LogOutput = Literal["stdout", "file", "both"]
LogFormat = Literal["text", "json"]

DEFAULT_LOG_FILE = "logs/efe-importer.log"

_TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(filename)s:%(lineno)d | %(message)s"
_JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", '
    '"file": "%(filename)s:%(lineno)d", "message": "%(message)s"}'
)

# requests/urllib3 log every connection at DEBUG.
_NOISY_LOGGERS = ("urllib3", "requests")


def _build_formatter(log_format: str) -> logging.Formatter:
    return logging.Formatter(_JSON_FORMAT if log_format == "json" else _TEXT_FORMAT)


def _file_handler(file_path: str) -> RotatingFileHandler:
    log_dir = os.path.dirname(file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    return RotatingFileHandler(file_path, maxBytes=10 * 1024 * 1024, backupCount=5)


def configure_logging(
    level: str | int | None = None,
    output: LogOutput | None = None,
    file_path: str | None = None,
    log_format: LogFormat | None = None,
    quiet: Iterable[str] = _NOISY_LOGGERS,
) -> None:
    """Configure the root logger.

    Unset arguments fall back to ``LOG_LEVEL``, ``LOG_OUTPUT``,
    ``LOG_FILE_PATH`` and ``LOG_FORMAT``, read at call time so values loaded
    from a ``.env`` file in ``main()`` apply.
    """
    level = level or os.environ.get("LOG_LEVEL", "INFO").upper()
    output = output or os.environ.get("LOG_OUTPUT", "file").lower()
    file_path = file_path or os.environ.get("LOG_FILE_PATH") or DEFAULT_LOG_FILE
    log_format = log_format or os.environ.get("LOG_FORMAT", "text").lower()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handlers: list[logging.Handler] = []
    if output in ("stdout", "both"):
        handlers.append(logging.StreamHandler(sys.stdout))
    if output in ("file", "both"):
        handlers.append(_file_handler(file_path))

    formatter = _build_formatter(log_format)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
