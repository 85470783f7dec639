"""
Structured JSON logging for the provenance ledger.

Every line is one JSON object.  Two things make it ledger-specific:

    - LogContext carries the correlation id, batch id, caller and
      operation of the lifecycle call in flight.  ProvenanceLedgerService
      binds it once per call, so every record written by the engine, the
      stores and the immutability listeners is tagged without threading
      those values through each signature.
    - Lifecycle records carry BatchStatus and HistoryAction members in
      their extras; the formatter writes them as their stored string
      values.  Rejected operations log the ProvenanceKernelError itself,
      whose structured attributes (batch_id, owner, limit...) become
      exc_* fields.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterator

_LOGGER_PREFIX = "provenance_kernel"


class LogContext:
    """Fields of the lifecycle call currently being served."""

    FIELDS = ("correlation_id", "batch_id", "caller", "operation")

    _fields: ContextVar[dict[str, str]] = ContextVar("ledger_log_context")

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(cls._fields.get({}))

    @classmethod
    def clear(cls) -> None:
        cls._fields.set({})

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[type["LogContext"]]:
        """Overlay non-None fields for the duration of the block.

        Unknown names raise TypeError.  Outer values come back on exit,
        including when the block raises.
        """
        unknown = set(fields) - set(cls.FIELDS)
        if unknown:
            raise TypeError(f"Unknown log context field(s): {sorted(unknown)}")
        merged = cls.get_all()
        merged.update({k: v for k, v in fields.items() if v is not None})
        token = cls._fields.set(merged)
        try:
            yield cls
        finally:
            cls._fields.reset(token)


# Attributes every LogRecord has; anything else came in through extra=
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _encode(value: Any) -> Any:
    # BatchStatus / HistoryAction log as the value the ledger stores
    if isinstance(value, Enum):
        return value.value
    return str(value)


def _error_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if not name.startswith("_"):
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: base fields, call context, extras, error."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for name, value in vars(record).items():
            if name not in _RECORD_ATTRS:
                entry.setdefault(name, value)

        if record.exc_info and record.exc_info[1] is not None:
            entry.update(_error_fields(record.exc_info[1]))
            entry["traceback"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=_encode)


def get_logger(name: str) -> logging.Logger:
    """Logger under the provenance_kernel namespace, e.g. 'services.history_log'."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *, level: int = logging.INFO, handler: logging.Handler | None = None
) -> None:
    """Attach the JSON handler to the provenance_kernel logger once.

    Later calls are no-ops until reset_logging().  Without a handler,
    records go to stderr.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    ledger_logger = logging.getLogger(_LOGGER_PREFIX)
    ledger_logger.setLevel(level)
    ledger_logger.propagate = False
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter())
    ledger_logger.addHandler(handler)


def reset_logging() -> None:
    """Detach handlers and allow configure_logging() to run again. Tests only."""
    global _configured
    with _lock:
        _configured = False
    ledger_logger = logging.getLogger(_LOGGER_PREFIX)
    ledger_logger.handlers.clear()
    ledger_logger.setLevel(logging.WARNING)
