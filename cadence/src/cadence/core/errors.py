"""Exception types shared by the recurrence core."""
from __future__ import annotations


class DescriptorError(ValueError):
    """Raised when a schedule descriptor violates its field invariants."""


class CronSyntaxError(DescriptorError):
    """Raised when a cron expression does not follow the five-field grammar."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ScheduleInvariantError(RuntimeError):
    """Raised when a recomputed ``next_run`` does not advance past the fire time.

    The resolver guarantees strictly increasing fire times; seeing this error
    means a resolver defect, never bad user input.
    """
