"""Recurrence core: cron validation, descriptors, resolution and lifecycle.

What:
  Re-export the pieces the report and backup schedulers call directly.

Why:
  Callers should depend on ``cadence.core`` rather than on the module layout,
  which keeps the cron parser and resolver free to evolve.

How:
  Import the public names from each submodule and list them in ``__all__``.

Interfaces:
  - validate / parse_cron / CronPattern: cron syntax.
  - Daily / Weekly / Monthly / Quarterly / Custom / descriptor_from_fields:
    recurrence rules.
  - next_fire_time / iter_fire_times: resolution.
  - ScheduleRecord / ScheduleLifecycle: ``next_run`` maintenance.
  - is_due / select_due / earliest_next_run / needs_attention: poller helpers.
"""

from .cron import CronPattern, parse_cron, validate
from .descriptor import (
    Custom,
    Daily,
    Frequency,
    Monthly,
    Quarterly,
    ScheduleDescriptor,
    TimeOfDay,
    Weekly,
    descriptor_from_fields,
)
from .due import earliest_next_run, is_due, needs_attention, select_due
from .errors import CronSyntaxError, DescriptorError, ScheduleInvariantError
from .lifecycle import ScheduleLifecycle, ScheduleRecord
from .resolver import DEFAULT_SEARCH_HORIZON, iter_fire_times, next_fire_time

__all__ = [
    "CronPattern",
    "CronSyntaxError",
    "Custom",
    "DEFAULT_SEARCH_HORIZON",
    "Daily",
    "DescriptorError",
    "Frequency",
    "Monthly",
    "Quarterly",
    "ScheduleDescriptor",
    "ScheduleInvariantError",
    "ScheduleLifecycle",
    "ScheduleRecord",
    "TimeOfDay",
    "Weekly",
    "descriptor_from_fields",
    "earliest_next_run",
    "is_due",
    "iter_fire_times",
    "needs_attention",
    "next_fire_time",
    "parse_cron",
    "select_due",
    "validate",
]
