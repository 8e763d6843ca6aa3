"""
Logging Configuration Module.

Installs the root handlers used by the timelane command-line tools and any
host application embedding the engine: a size-rotated log file under
``logs/`` and an optional console stream.
"""

import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_DIR = "logs"
LOG_FILENAME = "timelane.log"
MAX_BYTES = 5 * 1024 * 1024  # 5 MB
BACKUP_COUNT = 5
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class SafeRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler that skips a rollover blocked by a Windows file lock."""

    def doRollover(self) -> None:
        try:
            super().doRollover()
        except PermissionError:
            if sys.platform != "win32":
                raise


def _file_handler(
    log_dir: str, formatter: logging.Formatter, level: int
) -> Optional[logging.Handler]:
    """
    Creates the rotating file handler, or None if no log file can be opened.

    Falls back to the working directory when ``log_dir`` cannot be created.
    """
    try:
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, LOG_FILENAME)
    except OSError as e:
        print(f"Failed to create log directory {log_dir!r}: {e}")
        log_path = LOG_FILENAME

    try:
        handler = SafeRotatingFileHandler(
            log_path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
        )
    except OSError as e:
        print(f"CRITICAL: Could not set up file logging: {e}")
        return None

    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def setup_logging(
    debug_mode: bool = False,
    log_to_console: bool = True,
    log_to_file: bool = True,
    log_dir: str = LOG_DIR,
) -> None:
    """
    Replaces the root logger's handlers with the timelane handler set.

    Safe to call more than once; earlier handlers are closed first.

    Args:
        debug_mode (bool): DEBUG level when True, INFO otherwise.
        log_to_console (bool): Adds a stderr StreamHandler.
        log_to_file (bool): Adds the rotating file handler.
        log_dir (str): Directory for the log file.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    level = logging.DEBUG if debug_mode else logging.INFO
    root_logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if log_to_file:
        file_handler = _file_handler(log_dir, formatter, level)
        if file_handler is not None:
            root_logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)

    logging.debug(f"Timelane logging started at {datetime.now().isoformat()}")


def get_logger(name: str) -> logging.Logger:
    """Returns the logger for ``name`` (usually ``__name__``)."""
    return logging.getLogger(name)


def shutdown_logging() -> None:
    """Flushes and closes every handler, releasing the log file."""
    logging.shutdown()
