"""Test doubles for the recurrence core.

What:
  Provide a ``utc`` constructor for readable instants and resolver fakes that
  let lifecycle tests force specific ``next_run`` values.

Why:
  The lifecycle manager accepts any callable with the resolver's signature.
  Injecting fakes is the only way to exercise the non-advancing branch, which
  the real resolver never takes.

Interfaces:
  :func:`utc`, :class:`RecordingResolver`.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0) -> datetime:
    """Return an aware UTC datetime."""

    return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)


class RecordingResolver:
    """Resolver stand-in returning ``reference + offset`` and recording calls.

    A zero or negative ``offset`` simulates a defective resolver that does not
    advance; ``None`` simulates an exhausted custom schedule.
    """

    def __init__(self, offset: Optional[timedelta]) -> None:
        self.offset = offset
        self.calls: List[Tuple[object, datetime, timedelta]] = []

    def __call__(self, descriptor: object, reference: datetime, *, horizon: timedelta) -> Optional[datetime]:
        self.calls.append((descriptor, reference, horizon))
        if self.offset is None:
            return None
        return reference + self.offset


