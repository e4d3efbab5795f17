"""Shared helpers for Cadence.

Interfaces:
  ``JsonLogger`` and ``get_logger`` from :mod:`cadence.utils.logging`.
"""

from .logging import JsonLogger, get_logger

__all__ = ["JsonLogger", "get_logger"]
