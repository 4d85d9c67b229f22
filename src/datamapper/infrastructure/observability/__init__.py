"""
Observability
Structured logging helpers
"""
from datamapper.infrastructure.observability.logger import (
    bind_context,
    clear_context,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
    mapper_context,
)

__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "mapper_context",
]
