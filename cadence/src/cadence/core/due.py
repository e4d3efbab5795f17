"""Predicates a poller uses to pick schedules to dispatch.

The report scheduler's poller selects every active record whose ``next_run``
has been reached, dispatches it and then calls
:meth:`~cadence.core.lifecycle.ScheduleLifecycle.on_fired`. The backup
settings page additionally shows the earliest upcoming run and highlights
active schedules that have no next run at all.
"""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from .lifecycle import ScheduleRecord
from .resolver import as_utc


def is_due(record: ScheduleRecord, now: datetime) -> bool:
    """Return ``True`` when ``record`` is active and its ``next_run`` is not after ``now``."""

    if not record.is_active or record.next_run is None:
        return False
    return as_utc(record.next_run) <= as_utc(now)


def select_due(records: Iterable[ScheduleRecord], now: datetime) -> List[ScheduleRecord]:
    """Return the due records, oldest ``next_run`` first.

    Ties keep their input order so a poller dispatches deterministically.
    """

    due = [record for record in records if is_due(record, now)]
    # sorted() is stable; equal next_run values stay in input order.
    return sorted(due, key=lambda record: as_utc(record.next_run))


def earliest_next_run(records: Iterable[ScheduleRecord]) -> Optional[datetime]:
    """Return the soonest ``next_run`` among active records, or ``None``."""

    upcoming = [
        as_utc(record.next_run)
        for record in records
        if record.is_active and record.next_run is not None
    ]
    return min(upcoming) if upcoming else None


def needs_attention(records: Iterable[ScheduleRecord]) -> List[ScheduleRecord]:
    """Return active records whose ``next_run`` could not be computed."""

    return [record for record in records if record.needs_attention]
