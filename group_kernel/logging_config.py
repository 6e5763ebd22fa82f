"""
Structured JSON logging for the group store.

Every logger lives under the ``group_kernel`` namespace and writes one JSON
object per line.  Fields bound with ``LogContext`` (the acting user, the
company being edited, the consolidation period ...) are merged into every
line written while they are bound.

Usage::

    logger = get_logger("services.company")
    with LogContext.bind(actor_id=str(actor_id), company_id=str(company.id)):
        logger.info("company_updated", extra={"fields": ["name"]})
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping
from uuid import UUID

__all__ = [
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]

ROOT_LOGGER_NAME = "group_kernel"

_EMPTY: Mapping[str, str] = MappingProxyType({})
_bound: ContextVar[Mapping[str, str]] = ContextVar("group_log_context", default=_EMPTY)


class LogContext:
    """
    Request-scoped fields merged into every log line.

    Held in a ContextVar, so threads and asyncio tasks each see their own
    bindings.  Values are stored as strings; ``None`` means "leave as is".
    """

    FIELDS = ("correlation_id", "actor_id", "company_id", "period", "request_id")

    @classmethod
    def _merged(cls, fields: Mapping[str, Any]) -> Mapping[str, str]:
        unknown = sorted(set(fields) - set(cls.FIELDS))
        if unknown:
            raise TypeError(f"unknown log context field(s): {', '.join(unknown)}")
        merged = dict(_bound.get())
        merged.update({k: str(v) for k, v in fields.items() if v is not None})
        return MappingProxyType(merged)

    @classmethod
    def set(cls, **fields: Any) -> None:
        """Bind fields until cleared or overwritten."""
        _bound.set(cls._merged(fields))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_bound.get())

    @classmethod
    def clear(cls) -> None:
        _bound.set(_EMPTY)

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[type[LogContext]]:
        """Bind fields for the duration of a ``with`` block."""
        token = _bound.set(cls._merged(fields))
        try:
            yield cls
        finally:
            _bound.reset(token)


def _to_json(value: Any) -> Any:
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return str(value)


# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "taskName"}


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per record: base fields, context, extras, exception.

    An ``extra`` key that names a bound context field replaces the bound
    value for that record.  Extras never replace the base fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        base: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload: dict[str, Any] = {**base, **_bound.get()}
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and key not in base
        )
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record))
        return json.dumps(payload, default=_to_json)

    def _exception_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        exc = record.exc_info[1]
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # GroupKernelError subclasses keep their context as public attributes
        for name, value in vars(exc).items():
            if not name.startswith("_") and name != "code":
                fields[f"exc_{name}"] = value
        fields["traceback"] = self.formatException(record.exc_info)
        return fields


def get_logger(name: str) -> logging.Logger:
    """``get_logger("engines.hierarchy")`` -> ``group_kernel.engines.hierarchy``."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


_setup_lock = threading.Lock()
_setup_done = False


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``group_kernel`` logger.

    Only the first call has an effect until ``reset_logging()``.
    """
    global _setup_done
    with _setup_lock:
        if _setup_done:
            return
        _setup_done = True

        if handler is None:
            handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())

        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(level)
        root.propagate = False
        root.addHandler(handler)


def reset_logging() -> None:
    """Detach handlers and allow configure_logging() to run again."""
    global _setup_done
    with _setup_lock:
        _setup_done = False
        root = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in list(root.handlers):
            root.removeHandler(handler)
        root.setLevel(logging.NOTSET)
        root.propagate = True
