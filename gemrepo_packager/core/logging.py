"""Structured logging configuration — structlog + stdlib logging."""

from __future__ import annotations

import logging
import logging.config
import os

import structlog

from gemrepo_packager.exceptions import ConfigurationError

LOG_FORMATS = ("console", "json")


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure structlog and stdlib logging.

    Reads from environment variables:
        GEMREPO_LOG_LEVEL  — log level (default: INFO), overridden by *level*
        GEMREPO_LOG_FORMAT — console | json (default: console), overridden by *log_format*

    Pipeline events carry whatever is bound with
    ``structlog.contextvars.bound_contextvars`` (the orchestrator binds the
    artifact name for the length of a run).
    """
    log_level = (level or os.environ.get("GEMREPO_LOG_LEVEL", "INFO")).upper()
    log_format = (log_format or os.environ.get("GEMREPO_LOG_FORMAT", "console")).lower()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigurationError(f"Unknown log level [{log_level}] (GEMREPO_LOG_LEVEL)")
    if log_format not in LOG_FORMATS:
        raise ConfigurationError(
            f"Unknown log format [{log_format}] (GEMREPO_LOG_FORMAT), expected one of: "
            + ", ".join(LOG_FORMATS)
        )

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Logs go to stderr so stdout stays clean for command output
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": shared_processors,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "structlog",
                },
            },
            "root": {
                "handlers": ["default"],
                "level": log_level,
            },
            "loggers": {
                "gemrepo_packager": {"level": log_level},
            },
        }
    )
