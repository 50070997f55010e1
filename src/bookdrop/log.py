# ABOUTME: Debug log setup: one plaintext line per significant event in the configured log file.
# ABOUTME: Modules keep logging through logging.getLogger(__name__); this only attaches the handler.

import logging
import os
from pathlib import Path

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(log_file: Path, level: int = logging.DEBUG) -> logging.Handler:
    """Attach a file handler for the debug log to the ``bookdrop`` logger.

    Calling it again with the same file reuses the existing handler.
    """
    logger = logging.getLogger("bookdrop")
    target = os.path.abspath(log_file)
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            return handler

    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler
