"""Pytest fixtures for unit tests of the recurrence core.

What:
  Make ``tests/unit`` importable (for :mod:`fakes`) and expose a strict
  lifecycle manager whose log lines are captured in memory.

Why:
  Lifecycle tests assert on both the returned records and the structured log
  output; sharing the wiring keeps each test focused on one behaviour.

Interfaces:
  :func:`log_stream`, :func:`lifecycle` (pytest fixtures).

Invariants & Safety:
  - Each test receives a fresh stream and manager; nothing leaks across
    tests.
"""

import io
import sys
from pathlib import Path

import pytest

from cadence.core.lifecycle import ScheduleLifecycle
from cadence.utils.logging import JsonLogger

UNIT_DIR = Path(__file__).resolve().parent
if str(UNIT_DIR) not in sys.path:
    sys.path.insert(0, str(UNIT_DIR))


@pytest.fixture
def log_stream() -> io.StringIO:
    """Return an in-memory stream collecting JSON log lines."""

    return io.StringIO()


@pytest.fixture
def lifecycle(log_stream: io.StringIO) -> ScheduleLifecycle:
    """Return a strict :class:`ScheduleLifecycle` logging into ``log_stream``."""

    return ScheduleLifecycle(strict=True, logger=JsonLogger(stream=log_stream, component="test"))
