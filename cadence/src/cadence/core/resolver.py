"""Next-fire-time resolution for schedule descriptors.

What:
  Compute the first instant strictly after a reference instant at which a
  :mod:`cadence.core.descriptor` variant should fire.

Why:
  Client reports and backups both persist a ``next_run`` column that the
  poller compares with the current time. Every create, edit and dispatch has
  to recompute it, so the calculation must be deterministic, side-effect free
  and take "now" as an argument instead of reading the clock.

How:
  The reference instant is converted into the descriptor's zone, candidate
  local dates are generated in ascending order for the frequency (daily,
  weekly, monthly, quarterly) and each candidate is converted back to UTC
  until one lies strictly after the reference. Custom expressions are handed
  to :mod:`croniter` (``day_or=False``) on the naive local wall clock; each
  match is attached to the zone and checked against the reference and the
  search horizon.

Interfaces:
  :func:`next_fire_time`, :func:`iter_fire_times`,
  :data:`DEFAULT_SEARCH_HORIZON`, :data:`QUARTER_EPOCH_MONTH`.

Invariants:
  - Results are aware UTC datetimes strictly greater than the reference.
  - ``DAILY``/``WEEKLY``/``MONTHLY``/``QUARTERLY`` always produce a result;
    only ``CUSTOM`` returns ``None`` (invalid expression or no match within
    the horizon).
  - Days that do not exist in a month are skipped, never clamped.
  - Quarterly cadence is anchored to the calendar (January, April, July,
    October), not to the reference instant.
  - Fixed-frequency times that fall in a daylight-saving gap fire at the
    shifted instant; custom expressions skip wall-clock times that do not
    exist. Ambiguous wall-clock times resolve to their first occurrence.

Safety/Performance:
  - No I/O and no shared state; safe to call concurrently.
  - croniter gives up after ``max_years_between_matches`` years, derived
    from the horizon, so unsatisfiable expressions terminate.
"""
from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime, timedelta, timezone
from math import ceil
from typing import Iterator, Optional
from zoneinfo import ZoneInfo

from croniter import CroniterBadDateError, croniter

from .cron import parse_cron
from .descriptor import (
    Custom,
    Daily,
    Monthly,
    Quarterly,
    ScheduleDescriptor,
    TimeOfDay,
    Weekly,
)
from .errors import CronSyntaxError

UTC = timezone.utc

DEFAULT_SEARCH_HORIZON = timedelta(days=4 * 366)

# Quarter months are those congruent to this month modulo 3.
QUARTER_EPOCH_MONTH = 1

_ONE_DAY = timedelta(days=1)


def as_utc(moment: datetime) -> datetime:
    """Return ``moment`` as an aware UTC datetime; naive values are taken as UTC."""

    if not isinstance(moment, datetime):
        raise TypeError(f"expected a datetime, got {type(moment).__name__}")
    if moment.tzinfo is None or moment.utcoffset() is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def _cron_weekday(day: date) -> int:
    return (day.weekday() + 1) % 7


def _at(day: date, time: TimeOfDay, zone: ZoneInfo) -> datetime:
    return datetime(day.year, day.month, day.day, time.hour, time.minute, tzinfo=zone).astimezone(UTC)


def _wall_clock_exists(local: datetime) -> bool:
    round_trip = local.astimezone(UTC).astimezone(local.tzinfo)
    return round_trip.replace(tzinfo=None) == local.replace(tzinfo=None)


def _every_day(start: date) -> Iterator[date]:
    day = start
    while True:
        yield day
        day += _ONE_DAY


def _every_week(start: date, day_of_week: int) -> Iterator[date]:
    day = start + timedelta(days=(day_of_week - _cron_weekday(start) + 7) % 7)
    while True:
        yield day
        day += timedelta(days=7)


def _every_nth_month(year: int, month: int, day_of_month: int, step: int) -> Iterator[date]:
    while True:
        if day_of_month <= monthrange(year, month)[1]:
            yield date(year, month, day_of_month)
        month += step
        year += (month - 1) // 12
        month = (month - 1) % 12 + 1


def _first_after(days: Iterator[date], time: TimeOfDay, zone: ZoneInfo, reference: datetime) -> datetime:
    for day in days:
        candidate = _at(day, time, zone)
        if candidate > reference:
            return candidate
    raise AssertionError("candidate generators are unbounded")  # pragma: no cover


def _next_custom(descriptor: Custom, reference: datetime, horizon: timedelta) -> Optional[datetime]:
    try:
        pattern = parse_cron(descriptor.cron_expression)
    except CronSyntaxError:
        return None
    zone = descriptor.zone
    limit = reference + horizon
    matches = croniter(
        pattern.canonical(),
        reference.astimezone(zone).replace(tzinfo=None),
        day_or=False,
        max_years_between_matches=max(1, ceil(horizon.days / 365)),
    )
    while True:
        try:
            wall_clock = matches.get_next(datetime)
        except CroniterBadDateError:
            return None
        local = wall_clock.replace(tzinfo=zone)
        if not _wall_clock_exists(local):
            continue
        instant = local.astimezone(UTC)
        if instant > limit:
            return None
        if instant > reference:
            return instant


def next_fire_time(
    descriptor: ScheduleDescriptor,
    reference: datetime,
    *,
    horizon: timedelta = DEFAULT_SEARCH_HORIZON,
) -> Optional[datetime]:
    """Return the next instant strictly after ``reference`` at which ``descriptor`` fires.

    What:
      Pure function of ``(descriptor, reference)``; the single source of truth
      for every ``next_run`` value stored by the report and backup schedulers.

    Why:
      The web application used to read the wall clock inside this
      calculation, which made it impossible to test against arbitrary
      instants and to replay a fire. Taking the reference explicitly keeps the
      function deterministic.

    How:
      Dispatch on the descriptor variant. Fixed frequencies build candidate
      local dates starting the day before the reference's local date and
      return the first candidate after the reference. ``CUSTOM`` validates the
      expression and asks croniter for matches, with ``horizon`` bounding the
      search.

    Args:
      descriptor: A :class:`Daily`, :class:`Weekly`, :class:`Monthly`,
        :class:`Quarterly` or :class:`Custom` value.
      reference: Instant to search after; naive values are read as UTC.
      horizon: Longest span a ``CUSTOM`` search may cover before giving up.

    Returns:
      Aware UTC datetime, or ``None`` when a ``CUSTOM`` expression is invalid
      or has no match within ``horizon``.

    Raises:
      TypeError: If ``reference`` is not a datetime or ``descriptor`` is not
        a known variant.
    """

    reference = as_utc(reference)
    if isinstance(descriptor, Custom):
        return _next_custom(descriptor, reference, horizon)
    if not isinstance(descriptor, (Daily, Weekly, Monthly, Quarterly)):
        raise TypeError(f"unsupported schedule descriptor: {descriptor!r}")

    zone = descriptor.zone
    # Starting one day early keeps the result exact when a DST shift pushes
    # the previous day's candidate past local midnight.
    start = reference.astimezone(zone).date() - _ONE_DAY
    if isinstance(descriptor, Daily):
        days = _every_day(start)
    elif isinstance(descriptor, Weekly):
        days = _every_week(start, descriptor.day_of_week)
    elif isinstance(descriptor, Monthly):
        days = _every_nth_month(start.year, start.month, descriptor.day_of_month, 1)
    else:
        month = start.month - (start.month - QUARTER_EPOCH_MONTH) % 3
        days = _every_nth_month(start.year, month, descriptor.day_of_month, 3)
    return _first_after(days, descriptor.time, zone, reference)


def iter_fire_times(
    descriptor: ScheduleDescriptor,
    reference: datetime,
    *,
    count: int,
    horizon: timedelta = DEFAULT_SEARCH_HORIZON,
) -> Iterator[datetime]:
    """Yield up to ``count`` successive fire times after ``reference``.

    Each result is fed back as the next reference, which is exactly how a
    schedule advances when it fires on time. Iteration stops early when the
    resolver returns ``None``.
    """

    if count < 0:
        raise ValueError("count must not be negative")
    current = reference
    for _ in range(count):
        upcoming = next_fire_time(descriptor, current, horizon=horizon)
        if upcoming is None:
            return
        yield upcoming
        current = upcoming
