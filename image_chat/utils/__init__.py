"""Utility module initialization."""

from .logging_utils import setup_logger, get_logger
from .file_utils import save_results
