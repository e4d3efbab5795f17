"""Schedule descriptors: the authored recurrence rule as a tagged variant.

What:
  Define one frozen dataclass per frequency (:class:`Daily`, :class:`Weekly`,
  :class:`Monthly`, :class:`Quarterly`, :class:`Custom`) together with the
  :class:`TimeOfDay` value and the conversion from the flat persisted form.

Why:
  Report and backup schedules are stored as a frequency enum plus several
  nullable sibling columns (``time``, ``dayOfWeek``, ``dayOfMonth``, cron
  string). Converting that shape into a variant once, at the boundary, means
  the resolver never has to null-check fields that do not apply to the active
  frequency.

How:
  Each variant validates its own fields in ``__post_init__`` and raises
  :class:`DescriptorError`. :func:`descriptor_from_fields` maps the flat form
  onto a variant and additionally checks custom cron strings with
  :func:`cadence.core.cron.parse_cron`; :meth:`to_fields` renders a variant
  back into the flat form for storage and logging.

Invariants:
  - Time zones are IANA identifiers resolvable by :mod:`zoneinfo`.
  - A :class:`Custom` value keeps the expression exactly as entered and does
    not validate it; only the flat-field constructor and the schedule schema
    do. The resolver re-validates before evaluating.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, ClassVar, Dict, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .cron import parse_cron
from .errors import DescriptorError

DEFAULT_TIME_ZONE = "UTC"

_TIME = re.compile(r"(\d{1,2}):(\d{2})", re.ASCII)


class Frequency(str, Enum):
    """How often a schedule fires."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    CUSTOM = "CUSTOM"


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_range(name: str, value: Any, low: int, high: int) -> None:
    if not _is_int(value) or not low <= value <= high:
        raise DescriptorError(f"{name} must be an integer in {low}-{high}, got {value!r}")


@lru_cache(maxsize=None)
def zone_for(name: str) -> ZoneInfo:
    """Return the :class:`~zoneinfo.ZoneInfo` for ``name`` or raise :class:`DescriptorError`."""

    if not isinstance(name, str) or not name:
        raise DescriptorError(f"time zone must be a non-empty string, got {name!r}")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise DescriptorError(f"unknown time zone '{name}'") from exc


@dataclass(frozen=True)
class TimeOfDay:
    """Wall-clock hour and minute in the schedule's time zone."""

    hour: int
    minute: int = 0

    def __post_init__(self) -> None:
        _check_range("hour", self.hour, 0, 23)
        _check_range("minute", self.minute, 0, 59)

    @classmethod
    def parse(cls, text: str) -> "TimeOfDay":
        """Parse ``"HH:MM"`` as stored by the report scheduler."""

        if not isinstance(text, str):
            raise DescriptorError(f"time must be an 'HH:MM' string, got {text!r}")
        match = _TIME.fullmatch(text.strip())
        if match is None:
            raise DescriptorError(f"time must look like 'HH:MM', got {text!r}")
        return cls(int(match.group(1)), int(match.group(2)))

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


def _coerce_time(value: Any) -> TimeOfDay:
    if isinstance(value, TimeOfDay):
        return value
    if isinstance(value, str):
        return TimeOfDay.parse(value)
    raise DescriptorError(f"time must be a TimeOfDay or 'HH:MM' string, got {value!r}")


class _DescriptorBase:
    """Behaviour shared by every descriptor variant."""

    frequency: ClassVar[Frequency]
    time_zone: str

    @property
    def zone(self) -> ZoneInfo:
        return zone_for(self.time_zone)

    def _init_time(self) -> None:
        # Frozen dataclass: coercion has to bypass __setattr__.
        object.__setattr__(self, "time", _coerce_time(getattr(self, "time")))

    def to_fields(self) -> Dict[str, Any]:
        """Render the flat persisted form; fields irrelevant to the variant are ``None``."""

        time = getattr(self, "time", None)
        return {
            "frequency": self.frequency.value,
            "time": str(time) if time is not None else None,
            "day_of_week": getattr(self, "day_of_week", None),
            "day_of_month": getattr(self, "day_of_month", None),
            "cron_expression": getattr(self, "cron_expression", None),
            "time_zone": self.time_zone,
        }


@dataclass(frozen=True)
class Daily(_DescriptorBase):
    """Fires every day at ``time``."""

    frequency: ClassVar[Frequency] = Frequency.DAILY

    time: TimeOfDay
    time_zone: str = DEFAULT_TIME_ZONE

    def __post_init__(self) -> None:
        self._init_time()
        zone_for(self.time_zone)


@dataclass(frozen=True)
class Weekly(_DescriptorBase):
    """Fires every week on ``day_of_week`` (0 = Sunday) at ``time``."""

    frequency: ClassVar[Frequency] = Frequency.WEEKLY

    time: TimeOfDay
    day_of_week: int
    time_zone: str = DEFAULT_TIME_ZONE

    def __post_init__(self) -> None:
        self._init_time()
        _check_range("day_of_week", self.day_of_week, 0, 6)
        zone_for(self.time_zone)


@dataclass(frozen=True)
class Monthly(_DescriptorBase):
    """Fires on ``day_of_month`` of every month in which that day exists."""

    frequency: ClassVar[Frequency] = Frequency.MONTHLY

    time: TimeOfDay
    day_of_month: int
    time_zone: str = DEFAULT_TIME_ZONE

    def __post_init__(self) -> None:
        self._init_time()
        _check_range("day_of_month", self.day_of_month, 1, 31)
        zone_for(self.time_zone)


@dataclass(frozen=True)
class Quarterly(_DescriptorBase):
    """Fires on ``day_of_month`` in January, April, July and October."""

    frequency: ClassVar[Frequency] = Frequency.QUARTERLY

    time: TimeOfDay
    day_of_month: int
    time_zone: str = DEFAULT_TIME_ZONE

    def __post_init__(self) -> None:
        self._init_time()
        _check_range("day_of_month", self.day_of_month, 1, 31)
        zone_for(self.time_zone)


@dataclass(frozen=True)
class Custom(_DescriptorBase):
    """Fires whenever the five-field ``cron_expression`` matches."""

    frequency: ClassVar[Frequency] = Frequency.CUSTOM

    cron_expression: str
    time_zone: str = DEFAULT_TIME_ZONE

    def __post_init__(self) -> None:
        zone_for(self.time_zone)


ScheduleDescriptor = Union[Daily, Weekly, Monthly, Quarterly, Custom]


def _coerce_frequency(value: Union[Frequency, str]) -> Frequency:
    if isinstance(value, Frequency):
        return value
    if isinstance(value, str):
        try:
            return Frequency(value.strip().upper())
        except ValueError:
            pass
    choices = ", ".join(member.value for member in Frequency)
    raise DescriptorError(f"frequency must be one of {choices}, got {value!r}")


def descriptor_from_fields(
    frequency: Union[Frequency, str],
    *,
    time: Union[TimeOfDay, str, None] = None,
    day_of_week: Optional[int] = None,
    day_of_month: Optional[int] = None,
    cron_expression: Optional[str] = None,
    time_zone: Optional[str] = None,
) -> ScheduleDescriptor:
    """Build a descriptor variant from the flat persisted representation.

    What:
      Accept the column layout used by the report and backup tables and return
      the matching variant.

    Why:
      This is the single place where authored input is checked against the
      per-frequency invariants, so API handlers can translate
      :class:`DescriptorError` into an input-validation response.

    How:
      Normalise ``frequency``, require the fields that frequency needs, ignore
      the rest, and for ``CUSTOM`` run :func:`parse_cron` so malformed
      expressions are rejected here rather than silently resolving to ``None``
      later.

    Args:
      frequency: :class:`Frequency` member or its name (case-insensitive).
      time: ``TimeOfDay`` or ``"HH:MM"``; required unless ``CUSTOM``.
      day_of_week: 0-6 with 0 = Sunday; required for ``WEEKLY``.
      day_of_month: 1-31; required for ``MONTHLY`` and ``QUARTERLY``.
      cron_expression: five-field expression; required for ``CUSTOM``.
      time_zone: IANA zone, ``UTC`` when omitted.

    Returns:
      The validated descriptor variant.

    Raises:
      DescriptorError: When a required field is missing or out of range, the
        zone is unknown, or the cron expression is malformed
        (:class:`~cadence.core.errors.CronSyntaxError`).
    """

    kind = _coerce_frequency(frequency)
    zone = time_zone or DEFAULT_TIME_ZONE
    if kind is Frequency.CUSTOM:
        if not cron_expression:
            raise DescriptorError("cron_expression is required for CUSTOM schedules")
        parse_cron(cron_expression)
        return Custom(cron_expression=cron_expression, time_zone=zone)
    if time is None:
        raise DescriptorError(f"time is required for {kind.value} schedules")
    if kind is Frequency.DAILY:
        return Daily(time=time, time_zone=zone)
    if kind is Frequency.WEEKLY:
        if day_of_week is None:
            raise DescriptorError("day_of_week is required for WEEKLY schedules")
        return Weekly(time=time, day_of_week=day_of_week, time_zone=zone)
    if day_of_month is None:
        raise DescriptorError(f"day_of_month is required for {kind.value} schedules")
    if kind is Frequency.MONTHLY:
        return Monthly(time=time, day_of_month=day_of_month, time_zone=zone)
    return Quarterly(time=time, day_of_month=day_of_month, time_zone=zone)
