"""structlog setup shared by the backend and the CLI.

The backend logs to stdout at ``Settings.log_level``; the CLI logs to
stderr (WARNING, or DEBUG with ``-v``) so stdout carries only the digest.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, TextIO

import structlog

from repo_digest.infrastructure.observability.logging.service_schema_processor import (
    service_schema_processor,
)

_CONFIGURED = False

# httpx logs every request at INFO; one analysis makes up to eight of them.
_CHATTY_LIBRARIES = ("httpx", "httpcore")

_JSON_ENVIRONMENTS = ("qa", "staging", "prod", "production")


def configure_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Configure structlog and route stdlib logging through it. Only the first call applies."""
    global _CONFIGURED  # noqa: PLW0603
    if _CONFIGURED:
        return
    _CONFIGURED = True

    numeric_level = _to_level(level)
    output = stream or sys.stdout
    renderer = _select_renderer()
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        service_schema_processor,
    ]

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(output)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared_processors,
                renderer,
            ],
        )
    )
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)
    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def get_logger(component: str) -> structlog.typing.FilteringBoundLogger:
    """Lazy logger tagged with ``context_component``; honours a later configure_logging()."""
    return structlog.get_logger(context_component=component)


def _to_level(level: str) -> int:
    numeric = logging.getLevelName(level.upper())
    return numeric if isinstance(numeric, int) else logging.INFO


def _select_renderer() -> Any:
    log_format = os.environ.get("LOG_FORMAT", "").lower()
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    if log_format == "console":
        return structlog.dev.ConsoleRenderer(colors=True)
    if os.environ.get("APP_ENV", "local").lower() in _JSON_ENVIRONMENTS:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True)
