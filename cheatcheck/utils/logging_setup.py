"""Centralized logging configuration for cheatcheck."""

import logging
import sys
from typing import Optional

ROOT_LOGGER = "cheatcheck"


class ConsoleFormatter(logging.Formatter):
    """Colored console formatter for terminals."""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        """Format with colors for console output."""
        message = super().format(record)
        color = self.COLORS.get(record.levelname)
        if color is None:
            return message
        # Only the level name is colored
        return message.replace(record.levelname, f"{color}{record.levelname}{self.RESET}", 1)


class _StderrHandler(logging.StreamHandler):
    """Stream handler that always writes to the current ``sys.stderr``."""

    def __init__(self):
        super().__init__(sys.stderr)

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def setup_logging(
    verbose: bool = False,
    name: str = ROOT_LOGGER,
    color: Optional[bool] = None,
) -> logging.Logger:
    """
    Setup logging for a cheatcheck run.

    Args:
        verbose: Log DEBUG messages instead of INFO
        name: Logger to configure (the package root by default)
        color: Force colored output on/off (default: only on a terminal)

    Returns:
        Configured logger instance
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(name)
    reset_logging(name)
    logger.setLevel(level)

    handler = _StderrHandler()
    handler.setLevel(level)

    if color is None:
        color = sys.stderr.isatty()
    fmt = '%(levelname)s: %(message)s'
    if verbose:
        fmt = '%(asctime)s - %(levelname)s - [%(threadName)s] - %(message)s'
    formatter_cls = ConsoleFormatter if color else logging.Formatter
    handler.setFormatter(formatter_cls(fmt, datefmt='%H:%M:%S'))

    logger.addHandler(handler)
    return logger


def reset_logging(name: str = ROOT_LOGGER) -> None:
    """Remove the handlers installed by ``setup_logging``."""
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance in the cheatcheck namespace
    """
    return logging.getLogger(name)


def log_operation(logger: logging.Logger, operation: str, **context):
    """
    Log an operation with context.

    Args:
        logger: Logger instance
        operation: Operation name
        **context: Additional context to log
    """
    logger.debug(f"Starting operation: {operation}", extra={'operation': operation, 'extra_fields': context})
