from __future__ import annotations

import json
from pathlib import Path

import pytest

from mining_game.game import COMPLETION_MESSAGE, DEFAULT_DATA_ROOT, ActionOutcome, OutcomeKind
from mining_game.ui.main import (
    DATA_ENV_VAR,
    UIDirectories,
    bootstrap_directories,
    describe_outcome,
    main,
    resolve_directories,
)


def test_resolve_directories_returns_package_defaults(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv(DATA_ENV_VAR, raising=False)

    directories = resolve_directories()

    assert isinstance(directories, UIDirectories)
    assert directories.data_root == DEFAULT_DATA_ROOT
    assert (directories.data_root / "levels.json").exists()


def test_resolve_directories_honours_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    data_dir = tmp_path / "data"
    data_dir.mkdir()

    monkeypatch.setenv(DATA_ENV_VAR, str(data_dir))

    directories = resolve_directories()

    assert directories.data_root == data_dir


def test_resolve_directories_errors_on_missing_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(DATA_ENV_VAR, str(tmp_path / "does_not_exist"))

    with pytest.raises(FileNotFoundError):
        resolve_directories()

    unchecked = resolve_directories(check_exists=False)
    assert unchecked.data_root == tmp_path / "does_not_exist"


def test_bootstrap_prints_message(capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv(DATA_ENV_VAR, raising=False)

    directories = bootstrap_directories()
    output = capsys.readouterr().out

    assert "Mining Game bootstrap" in output
    assert str(directories.data_root) in output


def test_cli_lists_levels(capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv(DATA_ENV_VAR, raising=False)

    exit_code = main(["--list-levels"])
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "Available levels" in output
    assert "Copper" in output
    assert "Obsidian" in output


def test_cli_lists_custom_table(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
):
    data = {
        "name": "Short",
        "levels": [{"level": 1, "mineral": "Tin", "ore_hp": 2, "ground_hp": 2}],
    }
    (tmp_path / "levels.json").write_text(json.dumps(data))
    monkeypatch.setenv(DATA_ENV_VAR, str(tmp_path))

    assert main(["--list-levels"]) == 0
    output = capsys.readouterr().out

    assert "Available levels (Short)" in output
    assert "Tin" in output


def test_describe_outcome_messages():
    assert describe_outcome(ActionOutcome(OutcomeKind.MINED, (1, 1), resource="Iron")) == "Collected 1 Iron"
    assert describe_outcome(ActionOutcome(OutcomeKind.MINED, (1, 1))) is None
    assert describe_outcome(ActionOutcome(OutcomeKind.DOOR_OPENED, (1, 1))) == "Next door is now open!"
    assert describe_outcome(ActionOutcome(OutcomeKind.LEVEL_CHANGED, level=3)) == "Entered level 3"
    assert describe_outcome(ActionOutcome(OutcomeKind.COMPLETED, level=11)) == COMPLETION_MESSAGE
    assert describe_outcome(ActionOutcome(OutcomeKind.IGNORED)) is None
