"""Cadence logging helpers emitting one JSON object per line.

What:
  Offer a tiny facade over Python streams so scheduling components can emit
  JSON log lines with consistent fields, including instants and schedule
  descriptors rendered in a stable textual form.

Why:
  Operators look for schedules that stopped advancing by grepping logs or by
  shipping them to a dashboard. A structured layout keeps parsing trivial, and
  rendering datetimes and descriptors centrally keeps call sites from
  formatting them differently.

How:
  Provide a :class:`JsonLogger` dataclass that accepts a target stream and
  enforces uppercase severity levels. ``extra`` values are normalised
  recursively (datetimes to ISO-8601, descriptors to their flat field
  mapping, enums to their value) before being serialised with ``json.dump``.

Interfaces:
  :class:`JsonLogger`, :func:`get_logger`.

Invariants & Safety:
  - The emitted payload always includes an ISO-8601 timestamp, severity and
    component name so downstream tooling can index entries reliably.
  - Values that are not JSON-native are rendered with ``str`` rather than
    raising, so logging never breaks a lifecycle operation.
  - Streams are flushed after every write.
"""
from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


@dataclass
class JsonLogger:
    """Structured JSON logger.

    What:
      Encapsulates the logic required to emit single-line JSON log entries that
      include timestamps, severity, a component tag and optional context.

    Why:
      Lifecycle operations log the schedule they touched; centralising the
      rendering guarantees a uniform schema for dashboards and test
      assertions.

    How:
      Stores the destination stream and component label, then exposes helper
      methods (:meth:`log`, :meth:`info`, :meth:`warning`, :meth:`error`) that
      merge a canonical payload with normalised extras.
    """

    stream: Any = field(default_factory=lambda: sys.stdout)
    component: str = "cadence"

    def log(self, level: str, message: str, *, extra: Optional[Dict[str, Any]] = None) -> None:
        """Emit a structured JSON log entry.

        Args:
          level: Human-readable severity (e.g. ``"info"`` or ``"error"``).
          message: Core log message, conventionally a snake_case event name.
          extra: Optional context dictionary.
        """

        payload: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "lvl": level.upper(),
            "msg": message,
            "component": self.component,
        }
        if extra:
            payload.update({key: _normalise(value) for key, value in extra.items()})
        json.dump(payload, self.stream, separators=(",", ":"))
        self.stream.write("\n")
        self.stream.flush()

    def info(self, message: str, **kwargs: Any) -> None:
        self.log("INFO", message, extra=kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log("WARN", message, extra=kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log("ERROR", message, extra=kwargs)


def _normalise(value: Any) -> Any:
    """Convert ``value`` into something :func:`json.dump` accepts."""

    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return _normalise(value.value)
    if isinstance(value, dict):
        return {str(key): _normalise(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_normalise(item) for item in value]
    to_fields = getattr(value, "to_fields", None)
    if callable(to_fields):
        return _normalise(to_fields())
    return str(value)


def get_logger(component: str) -> JsonLogger:
    """Construct a :class:`JsonLogger` bound to ``component`` writing to ``stdout``."""

    return JsonLogger(component=component)
