"""
Logging configuration for the Code Anonymizer.

All loggers live under the ``code_anonymizer`` namespace. Diagnostics are
written to stderr because anonymized text may be streamed to stdout.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

LOGGER_NAME = "code_anonymizer"

# Default log format
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
SIMPLE_FORMAT = "%(levelname)s: %(message)s"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    verbose: bool = False,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Configure the anonymizer's logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            unknown names fall back to INFO
        log_file: Optional file that receives every record in the
            detailed format
        verbose: Use the detailed format on the console too
        stream: Console stream, stderr by default

    Returns:
        The ``code_anonymizer`` logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(log_level)

    console_handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT if verbose else SIMPLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get the package logger, or its child ``code_anonymizer.<name>``."""
    if name:
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logging.getLogger(LOGGER_NAME)
