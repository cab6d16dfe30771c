"""
versioninfo package

Discovers build metadata (commit hash, branch name, remote identifier,
package version) from the environment, the enclosing git checkout and the
nearest package.json.

Key responsibilities are split across modules:
- `roots.py`: walk up from the working directory to the repository / package roots
- `resolvers.py`: the four async resolvers and `collect`
- `settings.py`: YAML settings (env variable names, defaults, strict mode)
- `stamp.py`: render resolved metadata through a Jinja2 template
- `cli.py`: CLI entrypoint (`show`, `stamp`)
"""

from __future__ import annotations

from versioninfo.errors import VersionInfoError
from versioninfo.resolvers import (
    BuildInfo,
    MetadataError,
    RemoteParseError,
    collect,
    get_branch,
    get_commit,
    get_remote,
    get_version,
    normalize_remote,
)
from versioninfo.roots import Roots, discover_roots, find_root, locate_roots
from versioninfo.settings import Settings, SettingsError, load_settings
from versioninfo.stamp import StampError, render_stamp, stamp_file

__all__ = [
    "__version__",
    "BuildInfo",
    "MetadataError",
    "RemoteParseError",
    "Roots",
    "Settings",
    "SettingsError",
    "StampError",
    "VersionInfoError",
    "collect",
    "discover_roots",
    "find_root",
    "get_branch",
    "get_commit",
    "get_remote",
    "get_version",
    "load_settings",
    "locate_roots",
    "normalize_remote",
    "render_stamp",
    "stamp_file",
]

__version__ = "0.1.0"
