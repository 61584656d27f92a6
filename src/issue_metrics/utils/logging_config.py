"""Logging setup for the pipeline layers."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from issue_metrics.utils.config import LOG_LEVEL

PACKAGE_LOGGER = "issue_metrics"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str | None = None, log_file: Path | None = None) -> logging.Logger:
    """
    Configure the package logger with a console handler.

    Safe to call more than once: existing handlers installed here are replaced,
    handlers added by the host application on the root logger are left alone.
    """
    log_level = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(log_level)
    logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Token acquisition in azure-identity is chatty at INFO.
    logging.getLogger("azure").setLevel(logging.WARNING)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a module logger (use __name__)."""
    return logging.getLogger(name)
