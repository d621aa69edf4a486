"""Logging configuration for the hypercube engine and its host."""

import logging
import sys
from typing import Optional

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL
}


def setup_logging(level: str = "INFO", format_type: str = "structured",
                  log_file: Optional[str] = None) -> logging.Logger:
    """Setup logging for the engine; returns the 'NCube' logger."""
    log_level = LEVELS.get(str(level).upper(), logging.INFO)

    if format_type == "structured":
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
    else:
        formatter = logging.Formatter(
            '%(levelname)s - %(message)s'
        )

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logger = logging.getLogger('NCube')
    logger.setLevel(log_level)

    return logger
