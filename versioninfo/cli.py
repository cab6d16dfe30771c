"""
cli.py

Responsibility: CLI entrypoint for versioninfo.

Commands:
- `show`: print the resolved commit, branch, remote and version
- `stamp`: render the resolved values into a file through a Jinja2 template

This module only orchestrates; resolution lives in `resolvers.py`,
settings in `settings.py`, rendering in `stamp.py`.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from versioninfo.errors import VersionInfoError
from versioninfo.resolvers import BuildInfo, collect
from versioninfo.settings import load_settings
from versioninfo.stamp import stamp_file

FIELDS = ("commit", "branch", "remote", "version")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _resolve(args: argparse.Namespace) -> BuildInfo:
    settings = load_settings(args.config)
    return asyncio.run(collect(settings=settings))


def show_cmd(args: argparse.Namespace) -> int:
    info = _resolve(args)
    values = info.as_dict()

    if args.field:
        print(values[args.field])
    elif args.json:
        print(json.dumps(values, indent=2, sort_keys=True))
    else:
        for name in FIELDS:
            print(f"{name}: {values[name]}")
    return 0


def stamp_cmd(args: argparse.Namespace) -> int:
    info = _resolve(args)
    out = stamp_file(args.template, args.output, info)
    print(f"Wrote {out}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="versioninfo", description="Discover commit, branch, remote and version metadata")
    p.add_argument("--config", default=None, help="Settings YAML file (or set env VERSIONINFO_CONFIG)")
    p.add_argument("-v", "--verbose", action="store_true", help="Log resolution details to stderr")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("show", help="Print the resolved metadata")
    s.add_argument("--json", action="store_true", help="Print as a JSON object")
    s.add_argument("--field", choices=FIELDS, default=None, help="Print a single value")
    s.set_defaults(func=show_cmd)

    st = sub.add_parser("stamp", help="Render the resolved metadata into a file")
    st.add_argument("template", nargs="?", default=None, help="Jinja2 template file (default: a small Python module)")
    st.add_argument("-o", "--output", required=True, help="File to write")
    st.set_defaults(func=stamp_cmd)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(bool(args.verbose))
    try:
        return int(args.func(args))
    except VersionInfoError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
