"""
stamp.py

Responsibility: Render resolved build metadata into a build artifact
(a generated module, a banner, a JSON file...) through a Jinja2 template.

Template context:
- `commit`, `branch`, `remote`, `version`: the resolved strings
- `build`: the `BuildInfo` itself

Undefined names are errors, so a typo in a template never produces an empty stamp.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, StrictUndefined, TemplateError

from versioninfo.errors import VersionInfoError
from versioninfo.resolvers import BuildInfo

DEFAULT_TEMPLATE = '''\
# Generated by versioninfo. Do not edit.
COMMIT = {{ commit | pyliteral }}
BRANCH = {{ branch | pyliteral }}
REMOTE = {{ remote | pyliteral }}
VERSION = {{ version | pyliteral }}
'''


class StampError(VersionInfoError):
    pass


def _environment() -> Environment:
    env = Environment(
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    # Python source literal; `tojson` would split astral characters into surrogate pairs.
    env.filters["pyliteral"] = repr
    return env


def render_stamp(template_text: str, info: BuildInfo) -> str:
    try:
        template = _environment().from_string(template_text)
        return template.render(build=info, **info.as_dict())
    except TemplateError as e:
        raise StampError(f"Failed rendering stamp template: {e}") from e


def stamp_file(template_path: str | Path | None, output_path: str | Path, info: BuildInfo) -> Path:
    """
    Render `template_path` (or `DEFAULT_TEMPLATE` when None) into `output_path`.

    - Creates parent directories as needed.
    - Writes UTF-8 with `\\n` newlines for stable output across platforms.
    """
    if template_path is None:
        text = DEFAULT_TEMPLATE
    else:
        tpl = Path(template_path)
        if not tpl.is_file():
            raise StampError(f"Template file not found: {tpl}")
        try:
            text = tpl.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StampError(f"Failed reading template file {tpl}: {e}") from e

    rendered = render_stamp(text, info)
    out = Path(output_path)
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(rendered, encoding="utf-8", newline="\n")
    except OSError as e:
        raise StampError(f"Failed writing stamp to {out}: {e}") from e
    return out
