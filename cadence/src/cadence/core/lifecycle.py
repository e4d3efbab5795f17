"""Schedule lifecycle: keeping a record's ``next_run`` correct.

What:
  Provide :class:`ScheduleRecord`, the immutable view of a persisted schedule,
  and :class:`ScheduleLifecycle`, whose ``on_create``/``on_edit``/``on_fired``
  operations return updated records.

Why:
  The report and backup schedulers each own a table with ``isActive`` and
  ``nextRun`` columns. Both must recompute ``nextRun`` at the same three
  moments (creation, edit, dispatch) and must never store a value that would
  make the poller fire the same schedule twice. Concentrating those rules
  here gives both subsystems one invariant to rely on.

How:
  Every operation calls the resolver with the caller-supplied instant (the
  lifecycle never reads the clock) and builds a fresh record with
  :func:`dataclasses.replace`. ``on_fired`` additionally checks that the new
  ``next_run`` lies strictly after the dispatch instant; a violation raises
  :class:`ScheduleInvariantError` in strict mode, otherwise it is logged and
  the schedule is parked with ``next_run = None``.

Interfaces:
  :class:`ScheduleRecord`, :class:`ScheduleLifecycle`.

Invariants:
  - ``next_run`` is ``None`` whenever ``is_active`` is ``False``.
  - A non-null ``next_run`` is strictly after the instant it was computed
    from.
  - Dispatch, not completion, advances a schedule.
  - Persistence and serialising concurrent edits of one record are the
    caller's job.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..utils.logging import JsonLogger, get_logger
from .descriptor import ScheduleDescriptor
from .errors import ScheduleInvariantError
from .resolver import DEFAULT_SEARCH_HORIZON, as_utc, next_fire_time

Resolver = Callable[..., Optional[datetime]]


@dataclass(frozen=True)
class ScheduleRecord:
    """Snapshot of a schedule as its owning subsystem persists it.

    Attributes:
      descriptor: Recurrence rule the record was computed against.
      is_active: Whether the poller should consider the schedule.
      next_run: Next dispatch instant (UTC), or ``None`` when inactive or
        when no fire time could be found.
      last_computed_at: Instant ``next_run`` was last recomputed from;
        diagnostics only.
      last_fired_at: Dispatch instant passed to the latest ``on_fired``.
    """

    descriptor: ScheduleDescriptor
    is_active: bool
    next_run: Optional[datetime]
    last_computed_at: datetime
    last_fired_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.is_active and self.next_run is not None:
            raise ValueError("an inactive schedule cannot carry a next_run")

    @property
    def needs_attention(self) -> bool:
        """Active but without a next run: an administrator has to look at it."""

        return self.is_active and self.next_run is None


class ScheduleLifecycle:
    """Recompute ``next_run`` whenever a schedule is created, edited or fired.

    What:
      Stateless façade used by the report and backup schedulers.

    Why:
      Callers should not re-implement the "inactive means null" rule or the
      advancement check; both are easy to get subtly wrong and an error in
      either leads to missed or repeated dispatches.

    How:
      Holds the resolver, search horizon, strictness flag and logger; every
      method is a pure transformation from its arguments to a new
      :class:`ScheduleRecord`, apart from log lines.

    Args:
      resolver: Callable with the signature of :func:`next_fire_time`.
      horizon: Search horizon forwarded to the resolver.
      strict: Raise :class:`ScheduleInvariantError` on a non-advancing
        ``next_run`` instead of logging it and storing ``None``.
      logger: Destination for ``schedule_needs_attention`` and
        ``schedule_not_advancing`` events.
    """

    def __init__(
        self,
        resolver: Resolver = next_fire_time,
        *,
        horizon: timedelta = DEFAULT_SEARCH_HORIZON,
        strict: bool = False,
        logger: Optional[JsonLogger] = None,
    ) -> None:
        self._resolver = resolver
        self._horizon = horizon
        self._strict = strict
        self._logger = logger or get_logger("cadence.lifecycle")

    @property
    def strict(self) -> bool:
        return self._strict

    def _compute(
        self,
        descriptor: ScheduleDescriptor,
        is_active: bool,
        reference: datetime,
    ) -> Optional[datetime]:
        if not is_active:
            return None
        upcoming = self._resolver(descriptor, reference, horizon=self._horizon)
        if upcoming is None:
            self._logger.warning(
                "schedule_needs_attention",
                descriptor=descriptor,
                reference=reference,
            )
        return upcoming

    def on_create(self, descriptor: ScheduleDescriptor, is_active: bool, now: datetime) -> ScheduleRecord:
        """Return a new record whose ``next_run`` is computed from ``now``."""

        now = as_utc(now)
        return ScheduleRecord(
            descriptor=descriptor,
            is_active=is_active,
            next_run=self._compute(descriptor, is_active, now),
            last_computed_at=now,
        )

    def on_edit(
        self,
        record: ScheduleRecord,
        new_descriptor: ScheduleDescriptor,
        new_is_active: bool,
        now: datetime,
    ) -> ScheduleRecord:
        """Apply an edit, discarding the previous ``next_run``.

        Calling this twice with the same arguments yields equal records.
        ``last_fired_at`` is kept because an edit does not erase history.
        """

        now = as_utc(now)
        return replace(
            record,
            descriptor=new_descriptor,
            is_active=new_is_active,
            next_run=self._compute(new_descriptor, new_is_active, now),
            last_computed_at=now,
        )

    def on_fired(self, record: ScheduleRecord, fired_at: datetime) -> ScheduleRecord:
        """Advance ``record`` after its job was dispatched at ``fired_at``.

        Raises:
          ScheduleInvariantError: In strict mode, when the resolver returns a
            ``next_run`` that is not strictly after ``fired_at``.
        """

        fired_at = as_utc(fired_at)
        upcoming = self._compute(record.descriptor, record.is_active, fired_at)
        if upcoming is not None and as_utc(upcoming) <= fired_at:
            if self._strict:
                raise ScheduleInvariantError(
                    f"next_run {upcoming.isoformat()} does not advance past {fired_at.isoformat()}"
                )
            self._logger.error(
                "schedule_not_advancing",
                descriptor=record.descriptor,
                fired_at=fired_at,
                next_run=upcoming,
            )
            upcoming = None
        return replace(
            record,
            next_run=upcoming,
            last_computed_at=fired_at,
            last_fired_at=fired_at,
        )
