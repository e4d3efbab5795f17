"""CLI wiring tests ensuring Typer commands integrate with the core helpers.

What:
  Validate the ``validate``, ``next`` and ``check`` commands: printed output,
  exit codes and the use of runtime configuration defaults.

Why:
  Operators script around the CLI exit codes; regressions in the mapping of
  library errors to ``typer.Exit`` would break those scripts silently.

How:
  Use :class:`typer.testing.CliRunner` to invoke the commands in-process with
  the canned configuration applied by ``tests/conftest.py`` (default zone
  ``Europe/Paris``). Assertions look for whole lines on ``stdout`` because
  structured lifecycle logs may be interleaved depending on the Click
  version.
"""
from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from cadence.cli import app


runner = CliRunner()

EXAMPLES_DIR = Path(__file__).resolve().parents[1] / "examples"


def _lines(result) -> list[str]:
    return [line for line in result.stdout.splitlines() if line.strip()]


def test_validate_accepts_expression() -> None:
    result = runner.invoke(app, ["validate", "*/15 9-17 * * 1-5"])
    assert result.exit_code == 0
    assert "valid" in _lines(result)


def test_validate_rejects_expression_with_field_name() -> None:
    result = runner.invoke(app, ["validate", "0 0 * * 7"])
    assert result.exit_code == 1
    assert any(line.startswith("invalid: day-of-week") for line in _lines(result))


def test_next_prints_successive_fire_times() -> None:
    result = runner.invoke(
        app,
        ["next", "--frequency", "quarterly", "--time", "09:00", "--day-of-month", "1",
         "--tz", "UTC", "--at", "2024-01-01T09:00:00Z", "--count", "3"],
    )
    assert result.exit_code == 0, result.output
    assert _lines(result)[-3:] == [
        "2024-04-01T09:00:00+00:00",
        "2024-07-01T09:00:00+00:00",
        "2024-10-01T09:00:00+00:00",
    ]


def test_next_uses_configured_default_zone() -> None:
    result = runner.invoke(
        app, ["next", "--frequency", "DAILY", "--time", "09:00", "--at", "2024-07-15T00:00:00"]
    )
    assert result.exit_code == 0, result.output
    assert "2024-07-15T07:00:00+00:00" in _lines(result)


def test_next_custom_expression() -> None:
    result = runner.invoke(
        app,
        ["next", "--frequency", "CUSTOM", "--cron", "0 9 13 * 5", "--tz", "UTC",
         "--at", "2024-01-01T00:00:00Z"],
    )
    assert result.exit_code == 0, result.output
    assert "2024-09-13T09:00:00+00:00" in _lines(result)


def test_next_unsatisfiable_expression_exits_2() -> None:
    result = runner.invoke(
        app, ["next", "--frequency", "CUSTOM", "--cron", "0 0 31 2 *", "--at", "2024-01-01T00:00:00Z"]
    )
    assert result.exit_code == 2
    assert "no fire time within search horizon" in _lines(result)


@pytest.mark.parametrize(
    "arguments",
    [
        ["--frequency", "WEEKLY", "--time", "09:00"],
        ["--frequency", "HOURLY", "--time", "09:00"],
        ["--frequency", "CUSTOM", "--cron", "61 * * * *"],
        ["--frequency", "DAILY", "--time", "09:00", "--tz", "Nowhere/City"],
    ],
)
def test_next_invalid_descriptor_exits_1(arguments) -> None:
    result = runner.invoke(app, ["next", *arguments, "--at", "2024-01-01T00:00:00Z"])
    assert result.exit_code == 1


def test_next_rejects_malformed_reference() -> None:
    result = runner.invoke(app, ["next", "--frequency", "DAILY", "--time", "09:00", "--at", "yesterday"])
    assert result.exit_code == 2


def test_check_reports_every_schedule() -> None:
    result = runner.invoke(app, ["check", str(EXAMPLES_DIR / "schedules.yaml"), "--at", "2024-01-01T00:00:00Z"])
    assert result.exit_code == 0, result.output
    lines = _lines(result)
    # Paris is UTC+1 in January.
    assert "daily-engagement-digest\t2024-01-01T06:30:00+00:00" in lines
    assert "weekly-client-report\t2024-01-01T14:00:00+00:00" in lines
    assert "month-end-summary\t2024-01-31T17:00:00+00:00" in lines
    assert "quarterly-review\t2024-01-01T09:00:00+00:00" in lines
    assert "nightly-backup\t2024-01-01T01:00:00+00:00" in lines
    assert "business-hours-snapshot\t-" in lines


def test_check_flags_schedules_needing_attention(tmp_path: Path) -> None:
    document = tmp_path / "schedules.yaml"
    document.write_text(
        "version: 1\n"
        "schedules:\n"
        "  - name: leap-monday\n"
        "    frequency: CUSTOM\n"
        "    cron_expression: '0 0 29 2 1'\n"
        "  - name: nightly\n"
        "    frequency: CUSTOM\n"
        "    cron_expression: '0 2 * * *'\n"
        "    time_zone: UTC\n"
    )
    result = runner.invoke(app, ["check", str(document), "--at", "2024-01-01T00:00:00Z"])
    assert result.exit_code == 1
    lines = _lines(result)
    assert "leap-monday\tATTENTION" in lines
    assert "nightly\t2024-01-01T02:00:00+00:00" in lines


def test_check_invalid_document_exits_1(tmp_path: Path) -> None:
    document = tmp_path / "schedules.yaml"
    document.write_text("schedules:\n  - name: broken\n    frequency: CUSTOM\n    cron_expression: nope\n")
    result = runner.invoke(app, ["check", str(document)])
    assert result.exit_code == 1


def test_check_missing_file_exits_1(tmp_path: Path) -> None:
    result = runner.invoke(app, ["check", str(tmp_path / "absent.yaml")])
    assert result.exit_code == 1
