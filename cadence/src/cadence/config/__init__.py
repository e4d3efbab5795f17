"""Cadence configuration package.

What:
  Provide a single import surface for runtime configuration loading and
  schedule document parsing.

Why:
  Callers should not reach into the loader or schema modules directly; going
  through the package keeps every external payload on the validated path.

How:
  Re-export the loader helpers and the Pydantic models that form the
  supported API.

Interfaces:
  - load_runtime_config / get_runtime_config / reset_runtime_config
  - load_schedules / dump_schedules / LoadedDocument
  - RuntimeConfig / ScheduleBook / ScheduleSpec
  - ConfigLoadError / RuntimeConfigError / ScheduleDocumentError
"""

from .loader import (
    ConfigLoadError,
    LoadedDocument,
    RuntimeConfigError,
    ScheduleDocumentError,
    dump_schedules,
    get_runtime_config,
    load_runtime_config,
    load_schedules,
    reset_runtime_config,
)
from .schema import RuntimeConfig, ScheduleBook, ScheduleSpec, ValidationError

__all__ = [
    "ConfigLoadError",
    "LoadedDocument",
    "RuntimeConfig",
    "RuntimeConfigError",
    "ScheduleBook",
    "ScheduleDocumentError",
    "ScheduleSpec",
    "ValidationError",
    "dump_schedules",
    "get_runtime_config",
    "load_runtime_config",
    "load_schedules",
    "reset_runtime_config",
]
