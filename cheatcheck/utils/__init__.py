"""Shared utilities."""

from .logging_setup import get_logger, log_operation, reset_logging, setup_logging

__all__ = ["get_logger", "log_operation", "reset_logging", "setup_logging"]
