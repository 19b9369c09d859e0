"""Structured logging. API keys and Authorization headers never reach the output."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Optional, TextIO

REDACTED = "[REDACTED]"

_SENSITIVE = ("token", "password", "secret", "key", "bearer", "authorization")

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}


def _is_sensitive(text: str) -> bool:
    lowered = text.lower()
    return any(s in lowered for s in _SENSITIVE)


def _redact(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {
            k: REDACTED if isinstance(k, str) and _is_sensitive(k) else _redact(v)
            for k, v in obj.items()
        }
    if isinstance(obj, (list, tuple)):
        return [_redact(v) for v in obj]
    if isinstance(obj, str) and _is_sensitive(obj):
        return REDACTED
    return obj


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Fields passed via ``extra=``, redacted by name and by value."""
    return _redact({k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS})


class StructuredFormatter(logging.Formatter):
    """One line per record: a JSON object, or key=value pairs when use_json is False."""

    def __init__(self, use_json: bool = True) -> None:
        super().__init__()
        self.use_json = use_json

    def format(self, record: logging.LogRecord) -> str:
        fields: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **extra_fields(record),
        }
        if record.exc_info:
            fields["exception"] = self.formatException(record.exc_info)
        if self.use_json:
            return json.dumps(fields, default=str)
        return " ".join(f"{k}={v!r}" for k, v in fields.items())


def setup_logging(
    level: str = "INFO",
    use_json: bool = True,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """Install (or replace) our handler on the root logger. Writes to stderr; stdout carries tokens."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for existing in list(root.handlers):
        if isinstance(existing.formatter, StructuredFormatter):
            root.removeHandler(existing)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter(use_json=use_json))
    root.addHandler(handler)
    return handler
