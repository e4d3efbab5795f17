"""Test package initialiser.

What:
  Marks ``tests`` as a package so pytest can import reusable fixtures from
  nested modules.

Why:
  Tooling that references ``tests.unit`` or ``tests.e2e`` explicitly expects a
  package structure.

Invariants & Safety:
  - The file must remain side-effect free.
"""
