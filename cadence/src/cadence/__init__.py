"""
Module: cadence.__init__

What:
  Package root for Cadence, the recurrence resolver shared by the scheduled
  client-report and scheduled-backup subsystems.

Why:
  Both subsystems persist a ``next_run`` column that has to be recomputed on
  create, edit and dispatch. Exposing the namespace segments here keeps their
  imports stable while the internal layout evolves.

How:
  Provide an explicit ``__all__`` naming the public subpackages.

Interfaces:
  - core: cron validation, schedule descriptors, the resolver and the
    lifecycle manager.
  - config: runtime configuration and schedule documents.
  - utils: structured logging.
"""

__version__ = "0.1.0"

__all__ = [
    "config",
    "core",
    "utils",
]
