"""structlog configuration for the API, the CLI tools and the test suite.

Console output in development, one JSON object per line in production.
Stdlib records (uvicorn access logs, psycopg pool messages, the OpenAI SDK)
pass through the same processors so every line carries a level, an ISO
timestamp and the ``app`` field.
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

APP_NAME = "lorerag"

# Chatty below WARNING; only surfaced when the app itself runs at DEBUG.
_QUIET_LOGGERS = ("httpx", "httpcore", "openai", "psycopg.pool")


def _add_app_name(
    _logger: object, _method: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    event_dict.setdefault("app", APP_NAME)
    return event_dict


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        _add_app_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _renderer(json_output: bool) -> structlog.types.Processor:
    if json_output or os.environ.get("APP_ENV", "development") == "production":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR.
        json_output: Always render JSON. Otherwise JSON is used only when
            ``APP_ENV=production``.

    Returns:
        The root structlog logger.
    """
    level = log_level.upper()
    processors = _shared_processors()
    renderer = _renderer(json_output)

    structlog.configure(
        processors=[*processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    quiet_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a logger bound to *name*, applying default configuration once."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)
