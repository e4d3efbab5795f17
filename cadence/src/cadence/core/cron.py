"""Five-field cron expression validation.

What:
  Parse hand-written ``minute hour day-of-month month day-of-week`` strings
  into explicit value sets and render them in the canonical list form handed
  to :mod:`croniter`.

Why:
  Backup schedules are entered by administrators as raw cron strings. The
  backup form must reject malformed input with a user-facing error before a
  schedule is stored, and the resolver needs the same interpretation when it
  searches for the next fire time. Keeping both behind one parser guarantees
  that anything accepted at input time is evaluated with identical rules,
  whatever extra syntax croniter itself would tolerate.

How:
  Split on whitespace, check each token against the grammar for its field
  (``*``, ``n``, ``a-b``, ``*/n``, ``a/n``) and expand it into a frozen set of
  integers. :func:`validate` is the non-raising predicate used by input forms;
  :func:`parse_cron` raises :class:`CronSyntaxError` naming the offending
  field.

Interfaces:
  :func:`validate`, :func:`parse_cron`, :class:`CronPattern`,
  :class:`CronSyntaxError`, :data:`FIELDS`.

Invariants:
  - Tokens are validated independently; a syntactically valid pattern may
    still describe dates that never exist (``31`` in February). The resolver
    skips such dates.
  - When both day fields are restricted a date must satisfy both of them.
    This is an AND, unlike POSIX cron which ORs the two day fields; the
    resolver evaluates patterns with ``croniter(..., day_or=False)``.
  - Day-of-week uses ``0`` for Sunday; ``7`` is not accepted.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import FrozenSet, Tuple

from .errors import CronSyntaxError


@dataclass(frozen=True)
class CronField:
    """Name and inclusive bounds of one cron position."""

    name: str
    low: int
    high: int


FIELDS: Tuple[CronField, ...] = (
    CronField("minute", 0, 59),
    CronField("hour", 0, 23),
    CronField("day-of-month", 1, 31),
    CronField("month", 1, 12),
    CronField("day-of-week", 0, 6),
)

_NUMBER = re.compile(r"\d+", re.ASCII)


def _number(text: str, field: CronField, token: str) -> int:
    if not _NUMBER.fullmatch(text):
        raise CronSyntaxError(f"{field.name}: '{token}' is not a number", field=field.name)
    value = int(text)
    if not field.low <= value <= field.high:
        raise CronSyntaxError(
            f"{field.name}: {value} outside {field.low}-{field.high}",
            field=field.name,
        )
    return value


def _expand(token: str, field: CronField) -> FrozenSet[int]:
    """Expand a single token into the set of values it selects.

    Args:
      token: Raw text for one position of the expression.
      field: Bounds of that position.

    Returns:
      Frozen set of every value the token matches.

    Raises:
      CronSyntaxError: If the token is not ``*``, ``n``, ``a-b``, ``*/n`` or
        ``a/n`` with values inside the field bounds.
    """

    if token == "*":
        return frozenset(range(field.low, field.high + 1))
    if "/" in token:
        start_text, _, step_text = token.partition("/")
        if not _NUMBER.fullmatch(step_text) or int(step_text) <= 0:
            raise CronSyntaxError(
                f"{field.name}: step in '{token}' must be a positive integer",
                field=field.name,
            )
        start = field.low if start_text == "*" else _number(start_text, field, token)
        return frozenset(range(start, field.high + 1, int(step_text)))
    if "-" in token:
        low_text, _, high_text = token.partition("-")
        low = _number(low_text, field, token)
        high = _number(high_text, field, token)
        if low > high:
            raise CronSyntaxError(f"{field.name}: range '{token}' is reversed", field=field.name)
        return frozenset(range(low, high + 1))
    return frozenset({_number(token, field, token)})


@dataclass(frozen=True)
class CronPattern:
    """Expanded value sets of a validated cron expression."""

    expression: str
    minutes: FrozenSet[int]
    hours: FrozenSet[int]
    days_of_month: FrozenSet[int]
    months: FrozenSet[int]
    days_of_week: FrozenSet[int]

    def canonical(self) -> str:
        """Render the pattern as comma lists, with ``*`` for unrestricted fields.

        The result only uses syntax every croniter release understands, so
        step and range forms accepted here are never re-interpreted.
        """

        parts = []
        for values, field in zip(
            (self.minutes, self.hours, self.days_of_month, self.months, self.days_of_week),
            FIELDS,
        ):
            if len(values) == field.high - field.low + 1:
                parts.append("*")
            else:
                parts.append(",".join(str(value) for value in sorted(values)))
        return " ".join(parts)


def parse_cron(expression: str) -> CronPattern:
    """Parse ``expression`` into a :class:`CronPattern`.

    Args:
      expression: Five whitespace-separated tokens in the order minute, hour,
        day-of-month, month, day-of-week.

    Returns:
      The expanded pattern.

    Raises:
      CronSyntaxError: If the token count is not five or any token is illegal
        for its field.
    """

    if not isinstance(expression, str):
        raise CronSyntaxError("cron expression must be a string")
    tokens = expression.split()
    if len(tokens) != len(FIELDS):
        raise CronSyntaxError(f"expected 5 fields, got {len(tokens)}")
    minutes, hours, days_of_month, months, days_of_week = (
        _expand(token, field) for token, field in zip(tokens, FIELDS)
    )
    return CronPattern(
        expression=" ".join(tokens),
        minutes=minutes,
        hours=hours,
        days_of_month=days_of_month,
        months=months,
        days_of_week=days_of_week,
    )


def validate(expression: str) -> bool:
    """Return ``True`` when ``expression`` is a well-formed five-field cron string.

    What:
      Non-raising predicate for input forms and API handlers.

    Why:
      Callers reject malformed expressions as user errors (HTTP 400 in the web
      application) and only need a yes/no answer; exceptions would force every
      call site to repeat the same ``try`` block.

    How:
      Delegate to :func:`parse_cron` and convert :class:`CronSyntaxError` into
      ``False``.

    Args:
      expression: Any value; non-strings are rejected.

    Returns:
      ``True`` if all five tokens are legal for their fields.
    """

    try:
        parse_cron(expression)
    except CronSyntaxError:
        return False
    return True
