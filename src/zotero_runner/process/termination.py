"""Forced termination of host instances.

Signalling the owned process handle is not reliable on every platform the
host runs on (on macOS the launcher may exit while the application keeps
running), so teardown always follows up with one of these strategies.

Selection order:
1. Explicit override (``kill_command`` config value)
2. ``ZOTERO_PLUGIN_KILL_COMMAND`` environment variable
3. Platform strategy for ``platform.system()``
"""

from __future__ import annotations

import asyncio
import logging
import os
import platform
from dataclasses import dataclass

import psutil

from zotero_runner.errors import TerminationError

logger = logging.getLogger(__name__)

KILL_COMMAND_ENV = "ZOTERO_PLUGIN_KILL_COMMAND"
KILL_TIMEOUT_SECONDS = 10.0


@dataclass
class KillResult:
    """Outcome of a forced-kill attempt."""

    strategy: str
    returncode: int | None
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class KillStrategy:
    """Base class for forced-kill strategies."""

    name = "base"

    def describe(self) -> str:
        return self.name

    async def _spawn(self) -> asyncio.subprocess.Process:
        raise NotImplementedError

    async def run(self) -> KillResult:
        """Run the kill command and report its exit status.

        Raises:
            TerminationError: If the command cannot be spawned or does not
                finish in time
        """
        try:
            process = await self._spawn()
        except OSError as e:
            raise TerminationError(f"Could not run {self.describe()}: {e}") from e

        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout=KILL_TIMEOUT_SECONDS)
        except TimeoutError as e:
            process.kill()
            await process.wait()
            msg = f"{self.describe()} did not finish within {KILL_TIMEOUT_SECONDS}s"
            raise TerminationError(msg) from e
        output = stdout.decode("utf-8", errors="replace").strip() if stdout else ""
        return KillResult(strategy=self.name, returncode=process.returncode, output=output)


class ArgvKillStrategy(KillStrategy):
    """Kill by running a fixed argument vector."""

    def __init__(self, argv: list[str]) -> None:
        self.argv = argv

    def describe(self) -> str:
        return f"{self.name}: {' '.join(self.argv)}"

    async def _spawn(self) -> asyncio.subprocess.Process:
        return await asyncio.create_subprocess_exec(
            *self.argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )


class WindowsTaskKillStrategy(ArgvKillStrategy):
    name = "taskkill"

    def __init__(self, process_name: str) -> None:
        super().__init__(["taskkill", "/f", "/im", f"{process_name}.exe"])


class MacOSKillStrategy(ArgvKillStrategy):
    name = "pkill-macos"

    def __init__(self, process_name: str) -> None:
        super().__init__(["pkill", "-9", process_name])


class LinuxPkillStrategy(ArgvKillStrategy):
    name = "pkill"

    def __init__(self, process_name: str) -> None:
        super().__init__(["pkill", "-9", process_name])


class CommandOverrideStrategy(KillStrategy):
    """User-supplied shell command, replaces the platform default entirely."""

    name = "override"

    def __init__(self, command: str) -> None:
        self.command = command

    def describe(self) -> str:
        return f"{self.name}: {self.command}"

    async def _spawn(self) -> asyncio.subprocess.Process:
        return await asyncio.create_subprocess_shell(
            self.command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )


_PLATFORM_STRATEGIES: dict[str, type[ArgvKillStrategy]] = {
    "Windows": WindowsTaskKillStrategy,
    "Darwin": MacOSKillStrategy,
    "Linux": LinuxPkillStrategy,
}


def select_kill_strategy(
    override: str | None = None,
    process_name: str = "zotero",
    system: str | None = None,
) -> KillStrategy | None:
    """Pick the forced-kill strategy for this machine.

    Args:
        override: Shell command that takes precedence over everything else
        process_name: Host process name, matched verbatim
        system: ``platform.system()`` value, detected when None

    Returns:
        Strategy, or None when the platform has no known command
    """
    command = override or os.environ.get(KILL_COMMAND_ENV)
    if command:
        return CommandOverrideStrategy(command)

    system = system or platform.system()
    strategy_cls = _PLATFORM_STRATEGIES.get(system)
    if strategy_cls is None:
        return None
    return strategy_cls(process_name)


async def force_kill(
    override: str | None = None,
    process_name: str = "zotero",
) -> KillResult | None:
    """Run the selected forced-kill strategy. Never raises.

    A non-zero exit usually means no matching process was running, which is
    logged and otherwise ignored.
    """
    strategy = select_kill_strategy(override, process_name)
    if strategy is None:
        logger.error("No kill command known for %s", platform.system())
        return None

    logger.debug("Force-killing host with %s", strategy.describe())
    try:
        result = await strategy.run()
    except TerminationError as e:
        logger.error("Kill command failed: %s", e)
        return None

    if result.ok:
        logger.debug("Host instance killed")
    else:
        logger.info(
            "Kill command exited with %s, no running host instance matched%s",
            result.returncode,
            f": {result.output}" if result.output else "",
        )
    return result


def is_process_running(process_name: str) -> bool:
    """Check whether a process named exactly ``process_name`` is alive.

    The name is compared verbatim; ``.exe`` is ignored on Windows.
    """
    for proc in psutil.process_iter(["name"]):
        try:
            name = proc.info.get("name") or ""
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
        if name.removesuffix(".exe") == process_name:
            return True
    return False
