"""Cadence command-line interface.

What:
  Provide a Typer-based entry point for checking cron expressions, previewing
  fire times and auditing a schedules document. The module exposes the
  ``validate``, ``next`` and ``check`` commands.

Why:
  Administrators paste cron strings into the backup settings form and report
  owners want to know when a weekly or quarterly schedule will next run.
  Running the same validator and resolver from a shell lets them confirm an
  expression before saving it, and lets a cron job flag schedules that no
  longer have a next run.

How:
  Load the runtime configuration (defaults when no file exists), build
  descriptors through the same validation path the web forms use, and print
  results one per line. Library errors are mapped to exit codes with
  :class:`typer.Exit`.

Interfaces:
  ``app`` (Typer application), ``validate_command``, ``next_command``,
  ``check_command``, ``main``.

Invariants & Safety:
  - Exit codes: ``0`` success, ``1`` invalid input or schedules needing
    attention, ``2`` no fire time within the search horizon.
  - Instants are printed as ISO-8601 UTC.
  - Structured lifecycle logs go to ``stderr`` so ``stdout`` stays parseable.
"""
from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer

from .config.loader import ConfigLoadError, get_runtime_config, load_schedules
from .config.schema import RuntimeConfig
from .core.cron import parse_cron
from .core.descriptor import descriptor_from_fields
from .core.errors import CronSyntaxError, DescriptorError
from .core.lifecycle import ScheduleLifecycle
from .core.resolver import as_utc, iter_fire_times
from .utils.logging import JsonLogger


app = typer.Typer(help="Cadence schedule resolution tools")

LOGGER = logging.getLogger("cadence.cli")


def _runtime() -> RuntimeConfig:
    try:
        return get_runtime_config()
    except ConfigLoadError as exc:
        LOGGER.exception("runtime_load_failed: %s", exc)
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _parse_instant(text: Optional[str]) -> datetime:
    """Parse an ISO-8601 ``--at`` value; ``None`` means the current time.

    A trailing ``Z`` is accepted and naive values are taken as UTC.
    """

    if text is None:
        return datetime.now(timezone.utc)
    try:
        moment = datetime.fromisoformat(text.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise typer.BadParameter(f"'{text}' is not an ISO-8601 instant", param_hint="--at") from exc
    return as_utc(moment)


@app.command("validate")
def validate_command(
    expression: str = typer.Argument(..., help="Five-field cron expression, quoted"),
) -> None:
    """Check that EXPRESSION is a well-formed five-field cron string."""

    try:
        parse_cron(expression)
    except CronSyntaxError as exc:
        typer.echo(f"invalid: {exc}")
        raise typer.Exit(code=1) from exc
    typer.echo("valid")


@app.command("next")
def next_command(
    frequency: str = typer.Option(..., help="DAILY, WEEKLY, MONTHLY, QUARTERLY or CUSTOM"),
    time: Optional[str] = typer.Option(None, help="Time of day as HH:MM"),
    day_of_week: Optional[int] = typer.Option(None, help="0-6 with 0 = Sunday (WEEKLY)"),
    day_of_month: Optional[int] = typer.Option(None, help="1-31 (MONTHLY, QUARTERLY)"),
    cron: Optional[str] = typer.Option(None, help="Five-field cron expression (CUSTOM)"),
    tz: Optional[str] = typer.Option(None, help="IANA time zone; defaults to the configured zone"),
    at: Optional[str] = typer.Option(None, help="Reference instant (ISO-8601); defaults to now"),
    count: int = typer.Option(1, min=1, help="Number of successive fire times to print"),
) -> None:
    """Print the next fire time(s) of a schedule described on the command line.

    What:
      Build a descriptor from the options and print up to ``count`` fire
      times, each strictly after the previous one.

    Why:
      Lets an operator confirm what a report or backup schedule will do
      before saving it.

    How:
      Validate via :func:`descriptor_from_fields`, resolve with
      :func:`iter_fire_times` using the configured search horizon, and exit
      with ``2`` when no fire time exists.
    """

    runtime = _runtime()
    reference = _parse_instant(at)
    try:
        descriptor = descriptor_from_fields(
            frequency,
            time=time,
            day_of_week=day_of_week,
            day_of_month=day_of_month,
            cron_expression=cron,
            time_zone=tz or runtime.defaults.time_zone,
        )
    except DescriptorError as exc:
        typer.echo(f"invalid schedule: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    fire_times = list(
        iter_fire_times(descriptor, reference, count=count, horizon=runtime.resolver.horizon)
    )
    for moment in fire_times:
        typer.echo(moment.isoformat())
    if not fire_times:
        typer.echo("no fire time within search horizon")
        raise typer.Exit(code=2)


@app.command("check")
def check_command(
    path: Path = typer.Argument(..., help="Schedules YAML document"),
    at: Optional[str] = typer.Option(None, help="Reference instant (ISO-8601); defaults to now"),
) -> None:
    """Compute every schedule in PATH and flag the ones needing attention.

    Prints ``name<TAB>next_run`` per schedule, ``-`` for inactive schedules and
    ``ATTENTION`` for active schedules without a next run, and exits with
    ``1`` when any schedule needs attention.
    """

    runtime = _runtime()
    reference = _parse_instant(at)
    try:
        document = load_schedules(path.read_bytes())
    except OSError as exc:
        typer.echo(f"error: cannot read {path}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    except ConfigLoadError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    lifecycle = ScheduleLifecycle(
        horizon=runtime.resolver.horizon,
        strict=runtime.lifecycle.strict_invariants,
        logger=JsonLogger(stream=sys.stderr, component=runtime.logging.component),
    )
    attention = 0
    for spec in document.model.schedules:
        descriptor = spec.to_descriptor(runtime.defaults.time_zone)
        record = lifecycle.on_create(descriptor, spec.is_active, reference)
        if record.needs_attention:
            attention += 1
            shown = "ATTENTION"
        elif record.next_run is None:
            shown = "-"
        else:
            shown = record.next_run.isoformat()
        typer.echo(f"{spec.name}\t{shown}")

    LOGGER.info(
        "check_completed path=%s checksum=%s schedules=%s attention=%s",
        path,
        document.checksum,
        len(document.model.schedules),
        attention,
    )
    if attention:
        raise typer.Exit(code=1)


def main() -> None:
    """Execute the Typer application entry point."""

    app()


if __name__ == "__main__":  # pragma: no cover
    main()
