"""Strict loaders and serializers for Cadence configuration documents.

What:
  Provide helpers to locate, parse, validate and serialise the runtime
  configuration (``cadence.yaml``) and schedule documents.

Why:
  Configuration lives outside the application bundle and can be malformed.
  Centralising the parsing enforces consistent validation, so the resolver
  only ever sees descriptors that satisfy their invariants, and gives
  schedule documents a checksum operators can use to tell revisions apart.

How:
  Resolve candidate file locations based on explicit parameters, the
  ``CADENCE_CONFIG_PATH`` environment variable and defaults. Parse YAML with
  :func:`yaml.safe_load`, validate with the Pydantic models from
  :mod:`cadence.config.schema`, and wrap every failure in a typed error that
  names the offending document.

Interfaces:
  - :func:`load_runtime_config` / :func:`get_runtime_config` /
    :func:`reset_runtime_config`: manage ``cadence.yaml`` discovery and
    caching.
  - :func:`load_schedules` / :func:`dump_schedules`: schedule documents.
  - :class:`LoadedDocument`: parsed model plus raw text and checksum.

Invariants:
  - External payloads pass strict Pydantic validation before they are
    returned.
  - The runtime cache respects explicit reload requests and the precedence
    order of candidate paths.
  - A missing runtime file is only an error when the caller requires one;
    :func:`get_runtime_config` falls back to defaults.
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional, Tuple

import yaml
from pydantic import ValidationError as _PydanticValidationError

from .schema import RuntimeConfig, ScheduleBook


class ConfigLoadError(Exception):
    """Base error for configuration parsing or validation failures.

    Grouping failures under a single type lets the CLI report user input
    mistakes with one exit path, separately from programming errors.
    """


class RuntimeConfigError(ConfigLoadError):
    """Raised when ``cadence.yaml`` cannot be located, parsed or validated."""


class ScheduleDocumentError(ConfigLoadError):
    """Raised when a schedules document is not valid YAML or violates the schema."""


@dataclass
class LoadedDocument:
    """Bundle a parsed model with its raw representation.

    Attributes:
      model: The validated Pydantic model.
      raw: The text the model was parsed from.
      checksum: SHA-256 checksum prefixed with ``sha256:`` for log correlation.
    """

    model: Any
    raw: str
    checksum: str


_CONFIG_ENV = "CADENCE_CONFIG_PATH"
_DEFAULT_LOCATIONS: Tuple[Path, ...] = (
    Path("cadence.yaml"),
    Path("/etc/cadence/cadence.yaml"),
)
_RUNTIME_CACHE: Optional[Tuple[Optional[Path], RuntimeConfig]] = None


def _candidate_paths(path: Optional[Path]) -> Iterable[Path]:
    """Yield configuration file locations in priority order.

    What:
      Produce the ordered list of paths that should be inspected for
      ``cadence.yaml``.

    Why:
      Operators override the location through a function argument, the
      environment or well-known defaults; this helper captures that
      precedence chain in one place.

    How:
      Yield the explicit argument, then ``CADENCE_CONFIG_PATH``, then the
      defaults, expanding ``~`` and skipping duplicates.

    Args:
      path: Explicit path requested by the caller, or ``None``.

    Yields:
      Candidate paths ordered from most specific to least specific.
    """

    seen: set[Path] = set()
    env_path = os.environ.get(_CONFIG_ENV)
    ordered = [path, Path(env_path) if env_path else None, *_DEFAULT_LOCATIONS]
    for entry in ordered:
        if entry is None:
            continue
        candidate = entry.expanduser()
        if candidate not in seen:
            seen.add(candidate)
            yield candidate


def _parse_yaml(text: str, *, source: str, error: type[ConfigLoadError]) -> dict[str, Any]:
    """Parse YAML text that must contain a mapping at the top level.

    Args:
      text: Raw document contents.
      source: Human-readable origin used in error messages.
      error: Exception type to raise.

    Returns:
      The decoded mapping; an empty document yields ``{}``.

    Raises:
      ConfigLoadError: Subclass given by ``error`` when the YAML is invalid
        or not a mapping.
    """

    try:
        payload = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise error(f"Invalid YAML in {source}: {exc}") from exc
    if not isinstance(payload, dict):
        raise error(f"{source} must contain a mapping at the top-level")
    return payload


def _load_runtime_from_path(path: Path) -> RuntimeConfig:
    """Read ``path`` and validate it as a :class:`RuntimeConfig`.

    Raises:
      RuntimeConfigError: If the file cannot be read or fails validation.
    """

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise RuntimeConfigError(f"Configuration file missing: {path}") from exc
    except OSError as exc:  # pragma: no cover - filesystem surface
        raise RuntimeConfigError(f"Unable to read configuration file {path}: {exc}") from exc
    payload = _parse_yaml(text, source=str(path), error=RuntimeConfigError)
    try:
        return RuntimeConfig.model_validate(payload)
    except _PydanticValidationError as exc:
        raise RuntimeConfigError(f"Invalid configuration in {path}: {exc}") from exc


def load_runtime_config(
    path: Optional[Path | str] = None,
    *,
    reload: bool = False,
    required: bool = True,
) -> RuntimeConfig:
    """Resolve, parse and cache the runtime configuration.

    What:
      Locate ``cadence.yaml`` using the precedence chain, parse it and return
      a validated :class:`RuntimeConfig`.

    Why:
      The CLI and any embedding service need the same settings (default time
      zone, search horizon, strictness); caching avoids repeated disk IO while
      ``reload`` enables deterministic refreshes in tests.

    How:
      Consult the cache unless ``reload`` is requested or a different explicit
      path is asked for, then walk :func:`_candidate_paths` until a file
      exists. When none exists, either raise or fall back to defaults
      depending on ``required``.

    Args:
      path: Optional explicit location of ``cadence.yaml``.
      reload: When ``True`` bypass the cache.
      required: When ``False`` a missing file yields the default
        configuration instead of an error.

    Returns:
      The validated runtime configuration.

    Raises:
      RuntimeConfigError: If a located file is invalid, or no file exists and
        ``required`` is ``True``.
    """

    global _RUNTIME_CACHE

    requested_path = Path(path).expanduser() if isinstance(path, (str, Path)) else None
    if not reload and _RUNTIME_CACHE is not None:
        cached_path, cached_config = _RUNTIME_CACHE
        if requested_path is None or cached_path == requested_path:
            return cached_config

    searched: list[str] = []
    for candidate in _candidate_paths(requested_path):
        if not candidate.exists():
            searched.append(str(candidate))
            continue
        config = _load_runtime_from_path(candidate)
        _RUNTIME_CACHE = (candidate, config)
        return config

    if required:
        listing = ", ".join(searched) if searched else "<none>"
        raise RuntimeConfigError(f"Unable to locate cadence.yaml (searched: {listing})")
    config = RuntimeConfig()
    _RUNTIME_CACHE = (None, config)
    return config


def get_runtime_config() -> RuntimeConfig:
    """Return the cached runtime configuration, falling back to defaults."""

    return load_runtime_config(required=False)


def reset_runtime_config() -> None:
    """Clear the runtime configuration cache."""

    global _RUNTIME_CACHE
    _RUNTIME_CACHE = None


def _checksum(text: str) -> str:
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
    return f"sha256:{digest}"


def load_schedules(source: bytes) -> LoadedDocument:
    """Parse and validate a schedules document provided as bytes.

    What:
      Convert YAML bytes into a :class:`ScheduleBook` and package it with its
      text and checksum.

    Why:
      Administrators maintain schedules as files; every entry must pass the
      same descriptor checks the web forms apply (including cron syntax)
      before a record is created from it.

    How:
      Decode as UTF-8, parse with :func:`_parse_yaml`, validate through
      :class:`ScheduleBook` and compute the checksum over the original text.

    Args:
      source: Raw bytes of the YAML document.

    Returns:
      A :class:`LoadedDocument` whose ``model`` is a :class:`ScheduleBook`.

    Raises:
      ScheduleDocumentError: If decoding, parsing or validation fails.
    """

    try:
        text = source.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ScheduleDocumentError(f"schedules document is not UTF-8: {exc}") from exc
    payload = _parse_yaml(text, source="schedules document", error=ScheduleDocumentError)
    try:
        model = ScheduleBook.model_validate(payload)
    except _PydanticValidationError as exc:
        raise ScheduleDocumentError(f"Invalid schedules document: {exc}") from exc
    return LoadedDocument(model=model, raw=text, checksum=_checksum(text))


def dump_schedules(model: ScheduleBook) -> bytes:
    """Serialise a :class:`ScheduleBook` into canonical YAML bytes.

    Unset optional fields are dropped so the output reads like a hand-written
    document and loads back into an equal model.
    """

    payload = model.model_dump(mode="json", exclude_none=True)
    return yaml.safe_dump(payload, sort_keys=False).encode("utf-8")
