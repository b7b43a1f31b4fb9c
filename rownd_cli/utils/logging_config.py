"""JSON log records for the CLI's stderr diagnostics.

Every record is one line of JSON. Keyword arguments given to a
``StructuredLoggerAdapter`` call become top-level fields, as do values
bound with ``bind_context`` for the duration of a command.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from typing import Any

__all__ = [
    "StructuredJSONFormatter",
    "StructuredLoggerAdapter",
    "bind_context",
    "configure_logging",
    "logging_context",
]

# Attributes every LogRecord carries; anything else arrived via ``extra``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}

_ADAPTER_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel", "extra"})

_scope: ContextVar[dict[str, Any]] = ContextVar("rownd_cli_log_scope", default={})


class StructuredJSONFormatter(logging.Formatter):
    """Render a record as ``{"ts", "level", "logger", "message", ...}``."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_scope.get())
        payload.update(
            (k, v)
            for k, v in vars(record).items()
            if k not in _RECORD_ATTRS and not k.startswith("_")
        )
        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload["error"] = {
                "type": type(exc).__name__,
                "message": str(exc),
                "stack": self.formatException(record.exc_info),
            }
        return json.dumps(payload, default=repr)


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """``log.info("Saved", event="rownd.config.saved", path=p)`` style calls."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        fields = {k: kwargs.pop(k) for k in list(kwargs) if k not in _ADAPTER_KWARGS}
        extra: dict[str, Any] = {}
        for source in (self.extra or {}, kwargs.get("extra") or {}, fields):
            extra.update((_field_name(k), v) for k, v in source.items())
        kwargs["extra"] = extra
        return msg, kwargs


def _field_name(key: str) -> str:
    # LogRecord refuses extra keys that shadow its own attributes.
    return f"field_{key}" if key in _RECORD_ATTRS else key


def configure_logging(level: int = logging.WARNING, *, stream: Any | None = None) -> None:
    """Send JSON records at ``level`` and above to ``stream`` (stderr)."""
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredJSONFormatter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)


def bind_context(**fields: Any) -> Token:
    """Add fields to every record logged until the token is reset."""
    merged = {**_scope.get(), **{k: v for k, v in fields.items() if v is not None}}
    return _scope.set(merged)


@contextmanager
def logging_context(**fields: Any) -> Iterator[None]:
    token = bind_context(**fields)
    try:
        yield
    finally:
        _scope.reset(token)
