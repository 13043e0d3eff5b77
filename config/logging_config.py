"""
Logging Configuration

Console and daily-file handlers for the signal engine. Module loggers are
named after their import path (`src.daemon.trading_engine`, ...), so
configuring the "src" logger covers the whole engine.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

from .settings import LOGS_DIR, LOGGING


def setup_logging(
    name: str = "src",
    level: str | None = None,
    log_file: bool = True,
    log_dir: Path | None = None,
) -> logging.Logger:
    """
    Attach console and file handlers to the engine logger.

    Calling it again replaces the previous handlers. HTTP client loggers
    used by ccxt and requests are capped at LOGGING["library_level"].

    Args:
        name: Root logger of the engine
        level: Console level (default from settings); the file always gets DEBUG
        log_file: Whether to write `<file_prefix>_YYYYMMDD.log`
        log_dir: Directory for the log file (default LOGS_DIR)

    Returns:
        Configured logger
    """
    level = (level or LOGGING["level"]).upper()

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if log_file else level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(LOGGING["console_format"], datefmt="%H:%M:%S"))
    logger.addHandler(console)

    if log_file:
        directory = Path(log_dir) if log_dir is not None else LOGS_DIR
        directory.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d")
        file_handler = logging.FileHandler(
            directory / f"{LOGGING['file_prefix']}_{stamp}.log",
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOGGING["format"]))
        logger.addHandler(file_handler)

    for library in LOGGING["quiet_loggers"]:
        logging.getLogger(library).setLevel(LOGGING["library_level"])

    return logger
