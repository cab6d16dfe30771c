"""
settings.py

Responsibility: Load resolver settings (environment variable names, default
values, root markers, strict mode) from an optional YAML file.

All keys are optional; anything omitted keeps the built-in value:

    strict: false
    env:      {commit: COMMIT_HASH, branch: BRANCH_NAME, remote: REPO_URL, version: VERSION}
    defaults: {commit: unknown, branch: main, remote: unknown, version: unknown}
    markers:  {repository: .git, package: package.json}
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from versioninfo.errors import VersionInfoError

CONFIG_ENV_VAR = "VERSIONINFO_CONFIG"


class SettingsError(VersionInfoError, ValueError):
    pass


@dataclass(frozen=True)
class FieldNames:
    """One string per metadata field (commit, branch, remote, version)."""

    commit: str
    branch: str
    remote: str
    version: str

    def get(self, name: str) -> str:
        return str(getattr(self, name))


@dataclass(frozen=True)
class Markers:
    repository: str = ".git"
    package: str = "package.json"


def _default_env() -> FieldNames:
    return FieldNames(commit="COMMIT_HASH", branch="BRANCH_NAME", remote="REPO_URL", version="VERSION")


def _default_values() -> FieldNames:
    return FieldNames(commit="unknown", branch="main", remote="unknown", version="unknown")


@dataclass(frozen=True)
class Settings:
    """Resolver settings. `strict` turns every fallback into a raised error."""

    env: FieldNames = field(default_factory=_default_env)
    defaults: FieldNames = field(default_factory=_default_values)
    markers: Markers = field(default_factory=Markers)
    strict: bool = False


def _section(data: dict[str, Any], key: str) -> dict[str, str]:
    raw = data.get(key)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise SettingsError(f"`{key}` must be a mapping when provided.")
    out: dict[str, str] = {}
    for k, v in raw.items():
        if not isinstance(v, str) or not v.strip():
            raise SettingsError(f"`{key}.{k}` must be a non-empty string.")
        out[str(k)] = v.strip()
    return out


def _merge(base: Any, key: str, overrides: dict[str, str]) -> Any:
    allowed = {f.name for f in fields(base)}
    unknown = sorted(set(overrides) - allowed)
    if unknown:
        raise SettingsError(f"Unknown `{key}` entries: {', '.join(unknown)}")
    return replace(base, **overrides)


def parse_settings(data: dict[str, Any]) -> Settings:
    """
    Build `Settings` from an already-parsed mapping.
    """
    if not isinstance(data, dict):
        raise SettingsError("Settings must be a mapping/object at the top level.")

    base = Settings()
    strict_raw = data.get("strict", False)
    if not isinstance(strict_raw, bool):
        raise SettingsError("`strict` must be a boolean.")

    return Settings(
        env=_merge(base.env, "env", _section(data, "env")),
        defaults=_merge(base.defaults, "defaults", _section(data, "defaults")),
        markers=_merge(base.markers, "markers", _section(data, "markers")),
        strict=strict_raw,
    )


def load_settings(path: str | Path | None = None) -> Settings:
    """
    Load settings from `path`, or from the file named by $VERSIONINFO_CONFIG.

    With neither set, the built-in settings are returned.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        return Settings()

    p = Path(path)
    if not p.is_file():
        raise SettingsError(f"Settings file does not exist: {p}")
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise SettingsError(f"Settings file is not valid YAML: {p}") from e
    return parse_settings(data)
