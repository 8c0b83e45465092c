"""Structlog configuration for instacheck."""

import logging
import sys

import structlog

from instacheck.config import CheckerConfig, LogFormat


def quiet_loggers(names: list[str], level: str = "WARNING") -> None:
    """
    Raise the threshold of chatty third-party stdlib loggers.

    Args:
        names: Logger names, e.g. "httpx"
        level: Level name applied to each
    """
    threshold = getattr(logging, level.upper(), logging.WARNING)
    for name in names:
        logging.getLogger(name).setLevel(threshold)


def configure_logging(config: CheckerConfig | None = None) -> None:
    """
    Configure structlog with appropriate processors and output format.

    Args:
        config: CheckerConfig instance, uses defaults if None
    """
    if config is None:
        config = CheckerConfig()

    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )
    quiet_loggers(config.quiet_loggers, config.library_log_level)

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if config.log_format == LogFormat.JSON:
        processors.extend([
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ])
    else:
        processors.extend([
            structlog.dev.set_exc_info,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ])

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """
    Get a configured structlog logger.

    Args:
        name: Optional logger name for context

    Returns:
        Lazy structlog logger, resolved against the current configuration
        on each call
    """
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()
