"""Tests for the kill and status commands."""

from unittest.mock import AsyncMock, patch

import pytest
import typer

from zotero_runner.cli.process_cmd import kill_command, status_command
from zotero_runner.process.termination import KillResult


@pytest.fixture
def no_config(tmp_path, monkeypatch):
    """Run from a directory without a config file."""
    monkeypatch.chdir(tmp_path)


def test_kill_uses_defaults_without_config(no_config, capsys):
    mock_kill = AsyncMock(return_value=KillResult("pkill", 0))
    with patch("zotero_runner.cli.process_cmd.force_kill", mock_kill):
        kill_command()

    mock_kill.assert_awaited_once_with(None, "zotero")
    assert "Killed zotero." in capsys.readouterr().out


def test_kill_uses_config_settings(write_config):
    config_path = write_config(kill_command="killall -9 zotero-bin", process_name="zotero-bin")
    mock_kill = AsyncMock(return_value=KillResult("override", 0))

    with patch("zotero_runner.cli.process_cmd.force_kill", mock_kill):
        kill_command(config_path=str(config_path))

    mock_kill.assert_awaited_once_with("killall -9 zotero-bin", "zotero-bin")


def test_kill_nothing_running(no_config, capsys):
    mock_kill = AsyncMock(return_value=KillResult("pkill", 1))
    with patch("zotero_runner.cli.process_cmd.force_kill", mock_kill):
        kill_command()

    assert "No zotero instance is currently running." in capsys.readouterr().out


def test_kill_command_unavailable(no_config, capsys):
    with patch("zotero_runner.cli.process_cmd.force_kill", AsyncMock(return_value=None)):
        kill_command()

    assert "Kill command could not be run." in capsys.readouterr().out


def test_kill_explicit_missing_config_fails(tmp_path):
    with pytest.raises(typer.Exit) as exc_info:
        kill_command(config_path=str(tmp_path / "missing.yaml"))

    assert exc_info.value.exit_code == 1


@pytest.mark.parametrize("running, expected", [(True, "is running"), (False, "is not running")])
def test_status(no_config, capsys, running, expected):
    with patch(
        "zotero_runner.cli.process_cmd.is_process_running", return_value=running
    ) as mock_check:
        status_command()

    mock_check.assert_called_once_with("zotero")
    assert f"zotero {expected}" in capsys.readouterr().out
