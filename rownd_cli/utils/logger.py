"""Logging entry points used across the package."""

from __future__ import annotations

import logging
from typing import Any

from .logging_config import (
    StructuredLoggerAdapter,
    bind_context,
    configure_logging,
    logging_context,
)

__all__ = ["bind_context", "configure", "get_logger", "logging_context"]


def configure(*, level: int = logging.WARNING, stream: Any | None = None) -> None:
    configure_logging(level, stream=stream)


def get_logger(name: str, **context: Any) -> StructuredLoggerAdapter:
    """Return an adapter whose call kwargs become JSON fields.

    ``context`` is attached to every record from this adapter.
    """
    fields = {k: v for k, v in context.items() if v is not None}
    return StructuredLoggerAdapter(logging.getLogger(name), fields)
