"""Logging utilities for the image chat package."""

import os
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

LOGGER_NAME = "ImageChat"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str = LOGGER_NAME, log_file: Optional[str] = None,
                 level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Configure a logger with a console handler and an optional rotating file handler.

    Calling it again for the same name replaces the previous handlers, so the
    CLI can reconfigure the package logger after parsing its arguments.

    Args:
        name: Logger name
        log_file: Optional path to log file
        level: Logging level (int or a name such as 'DEBUG')

    Returns:
        logging.Logger: The configured logger
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        try:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(log_file, maxBytes=10*1024*1024, backupCount=5)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"Could not set up log file {log_file}: {e}")

    return logger


def get_logger() -> logging.Logger:
    """Get the package logger."""
    return logging.getLogger(LOGGER_NAME)
