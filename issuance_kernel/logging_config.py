"""
issuance_kernel.logging_config -- JSON log lines for the approval panels.

Every record under the ``issuance_kernel`` logger becomes one JSON object:

    {"ts": ..., "level": "WARNING", "logger": "issuance_kernel.services.editor",
     "event": "quantity_rejected", "request_id": "UMI-12", "request_kind": "mif",
     "user_name": "asha", "role": "inventory_head", "line_key": 2, ...}

Messages are event names (``request_lines_loaded``, ``submit_failed``);
the details travel in ``extra=``.  The panel fields are bound once per
panel operation with ``LogContext.bind`` instead of being repeated at
every call site.  Kernel errors logged with ``exc_info`` add an ``error``
object carrying the error ``code`` and its structured attributes.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import IO, Any

from issuance_kernel.exceptions import IssuanceKernelError

__all__ = [
    "PANEL_FIELDS",
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
]

LOGGER_ROOT = "issuance_kernel"

PANEL_FIELDS: tuple[str, ...] = ("request_id", "request_kind", "user_name", "role")

_panel_fields: ContextVar[dict[str, str] | None] = ContextVar(
    "issuance_panel_fields", default=None
)


class LogContext:
    """Panel fields attached to every record logged while bound."""

    @staticmethod
    def current() -> dict[str, str]:
        return dict(_panel_fields.get() or {})

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[dict[str, str]]:
        """Bind panel fields for the duration of a ``with`` block.

        ``None`` values leave an outer binding in place.  The previous
        binding is restored on exit, also when the block raises.
        """
        unknown = sorted(set(fields) - set(PANEL_FIELDS))
        if unknown:
            raise TypeError(f"Unknown panel log fields: {', '.join(unknown)}")
        merged = LogContext.current()
        merged.update({name: value for name, value in fields.items() if value is not None})
        token = _panel_fields.set(merged)
        try:
            yield merged
        finally:
            _panel_fields.reset(token)


# Attributes every LogRecord carries; anything else came in through extra=.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


def _describe_error(exc: BaseException) -> dict[str, Any]:
    described: dict[str, Any] = {"type": type(exc).__name__, "message": str(exc)}
    if isinstance(exc, IssuanceKernelError):
        described["code"] = exc.code
        described.update(
            {name: value for name, value in vars(exc).items() if not name.startswith("_")}
        )
    return described


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        entry.update(LogContext.current())
        for name, value in vars(record).items():
            if name not in _RECORD_ATTRS and name not in entry:
                entry[name] = value

        if record.exc_info and record.exc_info[1] is not None:
            entry["error"] = _describe_error(record.exc_info[1])
            entry["traceback"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=_jsonable)


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``issuance_kernel`` namespace."""
    return logging.getLogger(f"{LOGGER_ROOT}.{name}")


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: IO[str] | None = None,
    handler: logging.Handler | None = None,
) -> logging.Handler:
    """Send ``issuance_kernel`` records to one structured handler.

    A handler attached by an earlier call is replaced, so calling this
    again never duplicates output.
    """
    root = logging.getLogger(LOGGER_ROOT)
    for existing in list(root.handlers):
        if isinstance(existing.formatter, StructuredFormatter):
            root.removeHandler(existing)

    target = handler or logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())
    root.addHandler(target)
    root.setLevel(level)
    root.propagate = False
    return target
