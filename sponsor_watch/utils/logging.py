"""Logging configuration and utilities."""

import logging
import sys

import structlog
from structlog.stdlib import LoggerFactory

from sponsor_watch.config.settings import LoggingConfig


def setup_logging(config: LoggingConfig) -> logging.Logger:
    """
    Configure structured logging for the application.

    Args:
        config: Logging configuration

    Returns:
        Configured logger instance
    """
    log_level = getattr(logging, config.level.upper(), logging.INFO)

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    handlers.append(console_handler)

    if config.file:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(config.file, encoding="utf-8")
        file_handler.setLevel(log_level)
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        force=True
    )

    # apscheduler logs every job submission at INFO
    logging.getLogger("apscheduler").setLevel(max(log_level, logging.WARNING))

    if config.format == "json":
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.processors.JSONRenderer(ensure_ascii=False)
            ],
            context_class=dict,
            logger_factory=LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        return structlog.get_logger("sponsor_watch")
    else:
        return logging.getLogger("sponsor_watch")
