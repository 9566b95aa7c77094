#!/usr/bin/env python3
"""
Logging Configuration
Attaches console and file output to the `gltfscene` logger hierarchy.

Library modules only create named loggers; nothing is printed until an
application calls setup_logging().
"""

import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "gltfscene"
LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
FILE_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Route decoder log records to stdout and, optionally, a file

    Calling this again replaces the handlers from the previous call.

    Args:
        level: Threshold for the package logger and its handlers
        log_file: Path of a log file to (over)write, None for console only

    Returns:
        logging.Logger: The package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = [(logging.StreamHandler(sys.stdout), LOG_FORMAT)]
    if log_file:
        handlers.append((logging.FileHandler(log_file, mode='w', encoding='utf-8'), FILE_LOG_FORMAT))

    for handler, fmt in handlers:
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)

    logger.debug("Logging to %s", log_file or "stdout")
    return logger
