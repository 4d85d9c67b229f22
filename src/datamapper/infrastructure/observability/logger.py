"""
Structured Logging
structlog setup for the mapper, the record store and the session factory.

Mapper operations bind ``mapper`` and ``entity`` for the duration of a
save, so every record-store line emitted inside it carries them.
"""
from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import IO, Any, Iterator, MutableMapping, Optional

import structlog

from datamapper.config import get_settings, mask_url

REDACTED_KEYS = ("database_url", "url")


def redact_database_urls(_logger: Any, _method: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Mask passwords in URL-valued fields."""
    for key in REDACTED_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str):
            event_dict[key] = mask_url(value)
    return event_dict


def _processors(json_logs: bool) -> list[Any]:
    renderer: Any = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(colors=False)
    )
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        redact_database_urls,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]


def configure_logging(log_level: str = "INFO", json_logs: bool = True, stream: Optional[IO[str]] = None) -> None:
    """
    Route structlog through stdlib logging at ``log_level``.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_logs: JSON lines when True, plain console lines otherwise
        stream: Output stream (stdout by default)
    """
    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=getattr(logging, log_level.upper()),
        force=True,
    )
    structlog.configure(
        processors=_processors(json_logs),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging_from_settings() -> None:
    """Configure logging from DATAMAPPER_LOG_LEVEL and DATAMAPPER_LOG_FORMAT."""
    settings = get_settings()
    configure_logging(log_level=settings.log_level, json_logs=settings.json_logs)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind values to every later log line in this context (e.g. request_id)."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


@contextmanager
def mapper_context(**kwargs: Any) -> Iterator[None]:
    """Bind values for the duration of the block only."""
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield
