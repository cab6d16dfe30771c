"""
errors.py

Responsibility: Common exception base for the package.

Module-specific errors (`MetadataError`, `SettingsError`, `StampError`) live
next to the code that raises them and derive from `VersionInfoError`, so the
CLI can catch a single type.
"""

from __future__ import annotations


class VersionInfoError(RuntimeError):
    pass
