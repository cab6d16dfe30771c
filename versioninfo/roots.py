"""
roots.py

Responsibility: Locate the repository root and the package root by walking up
from a start directory (the current working directory by default).

A missing marker is a normal outcome (`None`), never an error.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from pathlib import Path

from versioninfo.settings import Settings


@dataclass(frozen=True)
class Roots:
    """Discovered root directories; either may be absent."""

    repository: Path | None = None
    package: Path | None = None


def find_root(marker: str, start: str | Path | None = None) -> Path | None:
    """
    Return the nearest directory at or above `start` that directly contains
    `marker` (file or directory), or None once the filesystem root is passed.
    """
    current = Path(start if start is not None else Path.cwd()).resolve()
    while True:
        if (current / marker).exists():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def locate_roots(start: str | Path | None = None, settings: Settings | None = None) -> Roots:
    markers = (settings or Settings()).markers
    return Roots(
        repository=find_root(markers.repository, start),
        package=find_root(markers.package, start),
    )


@functools.lru_cache(maxsize=1)
def discover_roots() -> Roots:
    """Process-wide roots for the current working directory, computed once."""
    return locate_roots()
