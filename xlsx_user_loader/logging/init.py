from __future__ import annotations

import logging
import os
import sys

"""Logging initialization with labeled prefixes.

Every line is ``LABEL message`` with LABEL in INFO|WARN|ERROR|SUMMARY, written to
stdout (CloudWatch picks stdout up as-is in Lambda). Standard logging only.
"""

__all__ = [
    "setup_logging",
    "get_logger",
    "log_summary",
    "reset_logging",
    "set_level",
    "set_debug",
    "LabeledFormatter",
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
]

LOGGER_NAME = "xlsx_user_loader"

# Custom SUMMARY level (between INFO=20 and WARNING=30)
SUMMARY_LEVEL = 25

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Formatter emitting ``LABEL message`` (plus traceback when present)."""

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        line = f"{level_label} {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _resolve_level(level: str | int | None) -> int:
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: str | int | None = None) -> logging.Logger:
    """Configure the application logger (idempotent).

    Level resolution: explicit argument, then ``LOG_LEVEL``, then INFO.
    Module loggers (``xlsx_user_loader.*``) propagate into this logger.
    """
    global _logger

    if _logger is not None:
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

    logger = logging.getLogger(LOGGER_NAME)
    resolved = _resolve_level(level)
    logger.setLevel(resolved)

    # Lambda のウォームスタートで handler が重複しないよう毎回クリア
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(resolved)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)

    # root (Lambda runtime handler) への二重出力防止
    logger.propagate = False

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    if _logger is None:
        return setup_logging()
    return _logger


def log_summary(message: str) -> None:
    """Log a message at SUMMARY level."""
    get_logger().log(SUMMARY_LEVEL, message)


def set_level(logger: logging.Logger, level: str | int) -> None:
    resolved = _resolve_level(level)
    for h in logger.handlers:
        h.setLevel(resolved)
    logger.setLevel(resolved)


def set_debug(logger: logging.Logger) -> None:
    set_level(logger, logging.DEBUG)


def reset_logging() -> None:
    """Reset the global logger state. Mainly for testing purposes."""
    global _logger
    _logger = None
