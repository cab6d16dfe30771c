from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest

from versioninfo.roots import discover_roots

SHA = "0123456789abcdef0123456789abcdef01234567"
OTHER_SHA = "89abcdef0123456789abcdef0123456789abcdef"
ENV_VARS = ("COMMIT_HASH", "BRANCH_NAME", "REPO_URL", "VERSION", "VERSIONINFO_CONFIG")


@pytest.fixture(autouse=True)
def _fresh_roots(monkeypatch: pytest.MonkeyPatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    discover_roots.cache_clear()
    yield
    discover_roots.cache_clear()


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def make_repo(tmp_path: Path) -> Callable[..., Path]:
    """
    Build a fake checkout: `.git/HEAD`, an optional loose ref, an optional
    config with a remote url, and an optional package.json.
    """

    def _make(
        *,
        name: str = "repo",
        head: str = "ref: refs/heads/main\n",
        refs: dict[str, str] | None = None,
        remote_url: str | None = "git@github.com:acme/widgets.git",
        package: dict[str, object] | None = None,
    ) -> Path:
        root = tmp_path / name
        git_dir = root / ".git"
        _write(git_dir / "HEAD", head)
        for ref, value in (refs if refs is not None else {"refs/heads/main": SHA + "\n"}).items():
            _write(git_dir / ref, value)

        config = "[core]\n\trepositoryformatversion = 0\n\tbare = false\n"
        if remote_url is not None:
            config += f'[remote "origin"]\n\turl = {remote_url}\n\tfetch = +refs/heads/*:refs/remotes/origin/*\n'
        _write(git_dir / "config", config)

        if package is not None:
            _write(root / "package.json", json.dumps(package))
        return root

    return _make


@pytest.fixture
def write_file() -> Callable[[Path, str], Path]:
    return _write
