"""Structured logging for instacheck."""

from instacheck.logging.setup import configure_logging, get_logger, quiet_loggers

__all__ = ["configure_logging", "get_logger", "quiet_loggers"]
