"""Tests for forced-kill strategies."""

import sys
from unittest.mock import AsyncMock, MagicMock, patch

import psutil
import pytest

from zotero_runner.errors import TerminationError
from zotero_runner.process.termination import (
    KILL_COMMAND_ENV,
    ArgvKillStrategy,
    CommandOverrideStrategy,
    KillResult,
    LinuxPkillStrategy,
    MacOSKillStrategy,
    WindowsTaskKillStrategy,
    force_kill,
    is_process_running,
    select_kill_strategy,
)


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch):
    monkeypatch.delenv(KILL_COMMAND_ENV, raising=False)


class TestSelectKillStrategy:
    def test_windows(self):
        strategy = select_kill_strategy(system="Windows")
        assert isinstance(strategy, WindowsTaskKillStrategy)
        assert strategy.argv == ["taskkill", "/f", "/im", "zotero.exe"]

    def test_macos(self):
        strategy = select_kill_strategy(system="Darwin")
        assert isinstance(strategy, MacOSKillStrategy)
        assert strategy.argv == ["pkill", "-9", "zotero"]

    def test_linux(self):
        strategy = select_kill_strategy(system="Linux")
        assert isinstance(strategy, LinuxPkillStrategy)
        assert strategy.argv == ["pkill", "-9", "zotero"]

    def test_process_name_used_verbatim(self):
        strategy = select_kill_strategy(process_name="Zotero", system="Linux")
        assert strategy.argv[-1] == "Zotero"

    def test_unknown_platform(self):
        assert select_kill_strategy(system="Plan9") is None

    def test_env_override_beats_platform(self, monkeypatch):
        monkeypatch.setenv(KILL_COMMAND_ENV, "killall -9 zotero-bin")

        strategy = select_kill_strategy(system="Windows")

        assert isinstance(strategy, CommandOverrideStrategy)
        assert strategy.command == "killall -9 zotero-bin"

    def test_explicit_override_beats_env(self, monkeypatch):
        monkeypatch.setenv(KILL_COMMAND_ENV, "from-env")

        strategy = select_kill_strategy(override="from-config", system="Linux")

        assert strategy.command == "from-config"

    def test_describe(self):
        assert select_kill_strategy(system="Linux").describe() == "pkill: pkill -9 zotero"
        assert CommandOverrideStrategy("x").describe() == "override: x"


class TestStrategyRun:
    @pytest.mark.asyncio
    async def test_argv_strategy_reports_exit_and_output(self):
        strategy = ArgvKillStrategy([sys.executable, "-c", "print('bye')"])

        result = await strategy.run()

        assert result.returncode == 0
        assert result.ok
        assert result.output == "bye"

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell syntax")
    async def test_override_strategy_runs_through_shell(self):
        result = await CommandOverrideStrategy("echo gone; exit 3").run()

        assert result.returncode == 3
        assert not result.ok
        assert result.output == "gone"

    @pytest.mark.asyncio
    async def test_missing_binary_raises_termination_error(self):
        strategy = ArgvKillStrategy(["definitely-not-a-real-kill-binary-xyz"])

        with pytest.raises(TerminationError, match="Could not run") as exc_info:
            await strategy.run()

        assert isinstance(exc_info.value.__cause__, OSError)

    @pytest.mark.asyncio
    async def test_hung_command_times_out(self, monkeypatch):
        monkeypatch.setattr("zotero_runner.process.termination.KILL_TIMEOUT_SECONDS", 0.2)
        strategy = ArgvKillStrategy([sys.executable, "-c", "import time; time.sleep(30)"])

        with pytest.raises(TerminationError, match="did not finish"):
            await strategy.run()


class TestForceKill:
    @pytest.mark.asyncio
    async def test_success(self):
        strategy = MagicMock()
        strategy.run = AsyncMock(return_value=KillResult("pkill", 0))
        with patch(
            "zotero_runner.process.termination.select_kill_strategy", return_value=strategy
        ):
            result = await force_kill()

        assert result.ok
        strategy.run.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_matching_process_is_not_an_error(self, caplog):
        strategy = MagicMock()
        strategy.run = AsyncMock(return_value=KillResult("pkill", 1))
        with patch(
            "zotero_runner.process.termination.select_kill_strategy", return_value=strategy
        ):
            with caplog.at_level("INFO"):
                result = await force_kill()

        assert result.returncode == 1
        assert "no running host instance matched" in caplog.text

    @pytest.mark.asyncio
    async def test_spawn_failure_is_logged_not_raised(self, caplog):
        strategy = MagicMock()
        strategy.run = AsyncMock(side_effect=TerminationError("Could not run pkill"))
        with patch(
            "zotero_runner.process.termination.select_kill_strategy", return_value=strategy
        ):
            result = await force_kill()

        assert result is None
        assert "Kill command failed" in caplog.text

    @pytest.mark.asyncio
    async def test_unknown_platform_logged(self, caplog):
        with patch(
            "zotero_runner.process.termination.select_kill_strategy", return_value=None
        ):
            assert await force_kill() is None
        assert "No kill command known" in caplog.text

    @pytest.mark.asyncio
    async def test_passes_override_and_name(self):
        with patch(
            "zotero_runner.process.termination.select_kill_strategy", return_value=None
        ) as mock_select:
            await force_kill("my-kill", "zotero-beta")
        mock_select.assert_called_once_with("my-kill", "zotero-beta")


class TestIsProcessRunning:
    def _proc(self, name):
        proc = MagicMock()
        proc.info = {"name": name}
        return proc

    def test_match(self):
        with patch("psutil.process_iter", return_value=[self._proc("bash"), self._proc("zotero")]):
            assert is_process_running("zotero") is True

    def test_windows_exe_suffix(self):
        with patch("psutil.process_iter", return_value=[self._proc("zotero.exe")]):
            assert is_process_running("zotero") is True

    def test_case_sensitive(self):
        with patch("psutil.process_iter", return_value=[self._proc("Zotero")]):
            assert is_process_running("zotero") is False

    def test_vanished_process_skipped(self):
        vanished = MagicMock()
        vanished.info.get.side_effect = psutil.NoSuchProcess(1)
        with patch("psutil.process_iter", return_value=[vanished, self._proc("zotero")]):
            assert is_process_running("zotero") is True
