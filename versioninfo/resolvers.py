"""
resolvers.py

Responsibility: Resolve the four build metadata values (commit, branch,
remote, version).

Each resolver uses the same precedence:
1) the environment override (e.g. $COMMIT_HASH) when set and non-empty
2) a value derived from files under the discovered root
3) the configured default

With `Settings.strict`, step 3 raises `MetadataError` instead. Nothing here
writes to the repository, and nothing is cached except the root lookup in
`roots.discover_roots`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Awaitable, Callable, Mapping
from urllib.parse import urlparse

from versioninfo.errors import VersionInfoError
from versioninfo.roots import Roots, discover_roots, locate_roots
from versioninfo.settings import Markers, Settings

LOGGER = logging.getLogger(__name__)

SYMREF_PREFIX = "ref:"
BRANCH_PREFIX = "ref: refs/heads/"
GITDIR_PREFIX = "gitdir:"
URL_ASSIGNMENT = "url = "
MAX_SYMREF_DEPTH = 5


class MetadataError(VersionInfoError):
    pass


class RemoteParseError(MetadataError):
    pass


@dataclass(frozen=True)
class BuildInfo:
    commit: str
    branch: str
    remote: str
    version: str

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


Deriver = Callable[[Path, Settings], Awaitable[str]]


def normalize_remote(url: str) -> str:
    """
    Reduce a remote URL to its repository path, e.g. `owner/repo`.

    - `git@host:owner/repo.git` -> `owner/repo`
    - `https://host/owner/repo.git` -> `owner/repo` (also http:// and ssh://)
    - anything else is kept, minus a trailing `.git`
    """
    remote = url.strip()
    if remote.startswith("git@"):
        remote = remote.split(":", 1)[1] if ":" in remote else ""
    elif remote.startswith(("http://", "https://", "ssh://")):
        try:
            remote = urlparse(remote).path.removeprefix("/")
        except ValueError as e:
            raise RemoteParseError(f"Could not parse remote from {url!r}: {e}") from e

    remote = remote.removesuffix(".git")
    if not remote:
        raise RemoteParseError(f"Could not parse remote from {url!r}")
    return remote


async def _read_text(path: Path) -> str:
    return await asyncio.to_thread(path.read_text, encoding="utf-8")


async def _git_dir(root: Path, marker: str) -> Path:
    """
    The git directory for a repository root. A `.git` file (worktree or
    submodule checkout) points elsewhere with a `gitdir: <path>` line.
    """
    dot_git = root / marker
    if not dot_git.is_file():
        return dot_git
    content = (await _read_text(dot_git)).strip()
    if not content.startswith(GITDIR_PREFIX):
        raise MetadataError(f"Unrecognized contents in {dot_git}")
    target = Path(content[len(GITDIR_PREFIX) :].strip())
    return target if target.is_absolute() else (root / target).resolve()


async def _common_dir(git_dir: Path) -> Path:
    # Linked worktrees keep refs and config in the main repository's git dir.
    pointer = git_dir / "commondir"
    if not pointer.is_file():
        return git_dir
    target = Path((await _read_text(pointer)).strip())
    return target if target.is_absolute() else (git_dir / target).resolve()


async def _read_packed_ref(packed: Path, ref: str) -> str | None:
    for raw in (await _read_text(packed)).splitlines():
        line = raw.strip()
        if not line or line.startswith(("#", "^")):
            continue
        sha, _, name = line.partition(" ")
        if name.strip() == ref:
            return sha
    return None


async def _read_ref(git_dir: Path, ref: str) -> str:
    """Raw content of `ref`, from a loose ref file or from packed-refs."""
    common = await _common_dir(git_dir)
    for base in dict.fromkeys([git_dir, common]):
        loose = base / ref
        if loose.is_file():
            return (await _read_text(loose)).strip()
        packed = base / "packed-refs"
        if packed.is_file():
            sha = await _read_packed_ref(packed, ref)
            if sha:
                return sha
    raise MetadataError(f"Reference not found: {ref}")


async def _follow_ref(git_dir: Path, content: str) -> str:
    value = content.strip()
    depth = 0
    while value.startswith(SYMREF_PREFIX):
        if depth >= MAX_SYMREF_DEPTH:
            raise MetadataError(f"Too many levels of symbolic references at {value!r}")
        value = await _read_ref(git_dir, value[len(SYMREF_PREFIX) :].strip())
        depth += 1
    return value


async def _commit_from_repo(root: Path, settings: Settings) -> str:
    git_dir = await _git_dir(root, settings.markers.repository)
    return await _follow_ref(git_dir, await _read_text(git_dir / "HEAD"))


async def _branch_from_repo(root: Path, settings: Settings) -> str:
    git_dir = await _git_dir(root, settings.markers.repository)
    head = await _read_text(git_dir / "HEAD")
    return head.removeprefix(BRANCH_PREFIX).strip()


async def _remote_from_repo(root: Path, settings: Settings) -> str:
    git_dir = await _git_dir(root, settings.markers.repository)
    config = await _read_text(await _common_dir(git_dir) / "config")
    line = next((line for line in config.splitlines() if URL_ASSIGNMENT in line), None)
    if line is None:
        raise RemoteParseError("No `url = ` entry in git config")
    return normalize_remote(line.split(URL_ASSIGNMENT, 1)[1])


async def _version_from_package(root: Path, settings: Settings) -> str:
    manifest = json.loads(await _read_text(root / settings.markers.package))
    version = manifest.get("version") if isinstance(manifest, dict) else None
    if not isinstance(version, str):
        raise MetadataError(f"No version field in {settings.markers.package}")
    return version


def _roots_for(settings: Settings) -> Roots:
    # A deleted working directory makes Path.cwd() raise; treat it as no roots.
    try:
        if settings.markers == Markers():
            return discover_roots()
        return locate_roots(settings=settings)
    except OSError:
        return Roots()


def _fallback(field: str, message: str, settings: Settings, log: logging.Logger, *, level: int, exc: BaseException | None = None) -> str:
    if settings.strict:
        if isinstance(exc, MetadataError):
            raise exc
        raise MetadataError(message) from exc
    default = settings.defaults.get(field)
    log.log(level, "%s Using default %s %r.", message, field, default, exc_info=exc, extra={"field": field, "source": "default"})
    return default


async def _resolve(
    field: str,
    root_kind: str,
    derive: Deriver,
    *,
    roots: Roots | None,
    env: Mapping[str, str] | None,
    settings: Settings | None,
    logger: logging.Logger | None,
    normalize: Callable[[str], str] | None = None,
) -> str:
    settings = settings or Settings()
    log = logger or LOGGER
    environ = os.environ if env is None else env

    override = environ.get(settings.env.get(field))
    if override:
        if normalize is None:
            return override
        try:
            return normalize(override)
        except MetadataError as e:
            return _fallback(field, f"Error reading {field} from ${settings.env.get(field)}.", settings, log, level=logging.ERROR, exc=e)

    roots = roots if roots is not None else _roots_for(settings)
    root = getattr(roots, root_kind)
    if root is None:
        return _fallback(field, f"No {root_kind} root found.", settings, log, level=logging.WARNING)

    try:
        value = (await derive(root, settings)).strip()
        if not value:
            raise MetadataError(f"Empty {field} under {root}")
    except (OSError, ValueError, MetadataError) as e:
        return _fallback(field, f"Error reading {field}.", settings, log, level=logging.ERROR, exc=e)

    log.debug("Resolved %s=%r from %s", field, value, root, extra={"field": field, "source": str(root)})
    return value


async def get_commit(
    roots: Roots | None = None,
    *,
    env: Mapping[str, str] | None = None,
    settings: Settings | None = None,
    logger: logging.Logger | None = None,
) -> str:
    """
    Commit hash: $COMMIT_HASH, else HEAD followed through its refs, else the default.
    """
    return await _resolve("commit", "repository", _commit_from_repo, roots=roots, env=env, settings=settings, logger=logger)


async def get_branch(
    roots: Roots | None = None,
    *,
    env: Mapping[str, str] | None = None,
    settings: Settings | None = None,
    logger: logging.Logger | None = None,
) -> str:
    """
    Branch name: $BRANCH_NAME, else HEAD without `ref: refs/heads/`, else the default.
    """
    return await _resolve("branch", "repository", _branch_from_repo, roots=roots, env=env, settings=settings, logger=logger)


async def get_remote(
    roots: Roots | None = None,
    *,
    env: Mapping[str, str] | None = None,
    settings: Settings | None = None,
    logger: logging.Logger | None = None,
) -> str:
    """
    Remote identifier (`owner/repo`): $REPO_URL, else the first `url = ` line
    of the git config, both passed through `normalize_remote`.
    """
    return await _resolve(
        "remote",
        "repository",
        _remote_from_repo,
        roots=roots,
        env=env,
        settings=settings,
        logger=logger,
        normalize=normalize_remote,
    )


async def get_version(
    roots: Roots | None = None,
    *,
    env: Mapping[str, str] | None = None,
    settings: Settings | None = None,
    logger: logging.Logger | None = None,
) -> str:
    """
    Package version: $VERSION, else the `version` field of package.json, else the default.
    """
    return await _resolve("version", "package", _version_from_package, roots=roots, env=env, settings=settings, logger=logger)


async def collect(
    roots: Roots | None = None,
    *,
    env: Mapping[str, str] | None = None,
    settings: Settings | None = None,
    logger: logging.Logger | None = None,
) -> BuildInfo:
    """
    Resolve all four values concurrently.
    """
    settings = settings or Settings()
    roots = roots if roots is not None else _roots_for(settings)
    kwargs = {"env": env, "settings": settings, "logger": logger}
    commit, branch, remote, version = await asyncio.gather(
        get_commit(roots, **kwargs),
        get_branch(roots, **kwargs),
        get_remote(roots, **kwargs),
        get_version(roots, **kwargs),
    )
    return BuildInfo(commit=commit, branch=branch, remote=remote, version=version)
