"""Pytest configuration shared by every suite.

What:
  Put the in-repo ``cadence/src`` directory on ``sys.path`` and apply the
  canned runtime configuration to every test.

Why:
  The CLI suites execute the real ``cadence`` package. Imports must resolve to
  the source tree rather than an installed wheel, and the runtime
  configuration cache is process-wide, so it has to be reset between tests to
  keep them independent of execution order.

How:
  Prepend the source directory when it exists and define an autouse fixture
  that points ``CADENCE_CONFIG_PATH`` at ``tests/data/cadence.yaml`` while
  resetting the cache before and after each test.

Interfaces:
  :func:`runtime_config` (pytest fixture), :data:`CONFIG_PATH`.
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "cadence" / "src"
if SRC_DIR.exists():
    sys.path.insert(0, str(SRC_DIR))

import pytest

from cadence.config.loader import reset_runtime_config

CONFIG_PATH = Path(__file__).resolve().parent / "data" / "cadence.yaml"


@pytest.fixture(autouse=True)
def runtime_config(monkeypatch: pytest.MonkeyPatch):
    """Apply the canned configuration file for every test.

    The test configuration uses ``Europe/Paris`` as its default zone and
    strict lifecycle invariants, so anything relying on defaults is visible
    in assertions.
    """

    monkeypatch.setenv("CADENCE_CONFIG_PATH", str(CONFIG_PATH))
    reset_runtime_config()
    try:
        yield
    finally:
        reset_runtime_config()
