from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import SHA
from versioninfo.cli import main


@pytest.fixture
def checkout(make_repo, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = make_repo(package={"version": "2.0.1"})
    monkeypatch.chdir(root)
    return root


def test_show_prints_all_fields(checkout: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["show"]) == 0
    assert capsys.readouterr().out.splitlines() == [
        f"commit: {SHA}",
        "branch: main",
        "remote: acme/widgets",
        "version: 2.0.1",
    ]


def test_show_json(checkout: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["show", "--json"]) == 0
    assert json.loads(capsys.readouterr().out) == {
        "commit": SHA,
        "branch": "main",
        "remote": "acme/widgets",
        "version": "2.0.1",
    }


def test_show_single_field_honors_env(
    checkout: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("VERSION", "3.0.0-beta")
    assert main(["show", "--field", "version"]) == 0
    assert capsys.readouterr().out == "3.0.0-beta\n"


def test_stamp_writes_default_module(checkout: Path, tmp_path: Path) -> None:
    out = tmp_path / "out" / "_build.py"
    assert main(["stamp", "-o", str(out)]) == 0
    text = out.read_text(encoding="utf-8")
    assert f"COMMIT = '{SHA}'" in text
    assert "VERSION = '2.0.1'" in text


def test_strict_settings_failure_exits_1(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    config = tmp_path / "strict.yml"
    config.write_text("strict: true\nmarkers:\n  repository: .versioninfo-test-missing-marker\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert main(["--config", str(config), "show"]) == 1
    assert capsys.readouterr().err.startswith("error: ")


def test_missing_config_exits_1(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--config", str(tmp_path / "missing.yml"), "show"]) == 1
    assert "does not exist" in capsys.readouterr().err


def test_unknown_field_is_a_usage_error() -> None:
    with pytest.raises(SystemExit) as exc:
        main(["show", "--field", "tag"])
    assert exc.value.code == 2


def test_stamp_to_directory_exits_1(checkout: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["stamp", "-o", str(tmp_path)]) == 1
    assert "Failed writing stamp" in capsys.readouterr().err
