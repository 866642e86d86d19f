"""Development-session orchestration.

A run goes through::

    NOT_STARTED -> PROFILE_PREPARED -> PROCESS_STARTED
        -> PLUGINS_INSTALLED (temporary mode only) -> READY -> STOPPED

``stop`` is valid from every state, is idempotent, and ``STOPPED`` is terminal.
"""

from __future__ import annotations

import logging
from enum import Enum

from zotero_runner.errors import RunnerStateError
from zotero_runner.options import RunOptions
from zotero_runner.plugins.installer import PluginInstaller
from zotero_runner.plugins.reload import ReloadCoordinator, ReloadOutcome
from zotero_runner.process.supervisor import ProcessSupervisor
from zotero_runner.profile.prefs import ProfileManager
from zotero_runner.remote import RemoteControlClient

logger = logging.getLogger(__name__)


class RunnerState(str, Enum):
    """Lifecycle states of a run."""

    NOT_STARTED = "not_started"
    PROFILE_PREPARED = "profile_prepared"
    PROCESS_STARTED = "process_started"
    PLUGINS_INSTALLED = "plugins_installed"
    READY = "ready"
    STOPPED = "stopped"


class Runner:
    """Runs the host with plugins under development installed.

    Usage::

        async with Runner(options, client) as runner:
            ...
            await runner.reload_all()
    """

    def __init__(
        self,
        options: RunOptions,
        client: RemoteControlClient,
        profile_manager: ProfileManager | None = None,
    ) -> None:
        options.validate()
        self.options = options
        self.client = client
        self.profile_manager = profile_manager or ProfileManager()
        self.supervisor = ProcessSupervisor(client)
        self.installer = PluginInstaller(client)
        self.reloader = ReloadCoordinator(options, client, self.installer.addon_ids)
        self._state = RunnerState.NOT_STARTED

    @property
    def state(self) -> RunnerState:
        return self._state

    @property
    def addon_ids(self) -> dict[str, str]:
        """Copy of the source dir -> host-assigned id mapping."""
        return dict(self.installer.addon_ids)

    def _transition(self, new_state: RunnerState) -> None:
        logger.debug("Runner: %s -> %s", self._state.value, new_state.value)
        self._state = new_state

    def _require(self, *states: RunnerState) -> None:
        if self._state not in states:
            allowed = ", ".join(s.value for s in states)
            raise RunnerStateError(f"Runner is {self._state.value}, expected one of: {allowed}")

    async def run(self) -> None:
        """Prepare the profile, start the host and install plugins.

        Raises:
            RunnerStateError: If the runner was already started
            InstallError: If a temporary install fails
            ProcessError: If the host cannot be spawned or connected to
        """
        self._require(RunnerState.NOT_STARTED)

        self.prepare_profile()
        self._transition(RunnerState.PROFILE_PREPARED)

        await self.supervisor.start(self.options)
        self._transition(RunnerState.PROCESS_STARTED)

        # Proxy plugins were installed with the profile
        if not self.options.as_proxy:
            await self.installer.install_temporary(self.options.plugins)
            self._transition(RunnerState.PLUGINS_INSTALLED)

        self._transition(RunnerState.READY)
        logger.info("Host is ready with %d plugin(s)", len(self.options.plugins))

    def prepare_profile(self) -> None:
        """Write preferences and, in proxy mode, install proxy plugins."""
        self.profile_manager.prepare(self.options)
        logger.debug("Profile prepared at %s", self.options.profile_dir)
        if self.options.as_proxy:
            self.installer.install_proxy(self.options.profile_dir, self.options.plugins)

    async def reload_all(self) -> list[ReloadOutcome]:
        """Reload every plugin with the strategy it was installed with."""
        self._require(RunnerState.READY)
        return await self.reloader.reload_all()

    async def reload_by_id(self, addon_id: str) -> None:
        self._require(RunnerState.READY)
        await self.reloader.reload_by_id(addon_id)

    async def reload_by_source_dir(self, source_dir: str) -> ReloadOutcome:
        self._require(RunnerState.READY)
        return await self.reloader.reload_by_source_dir(source_dir)

    async def stop(self) -> None:
        """Tear the run down. Safe in any state; never raises."""
        if self._state is RunnerState.STOPPED:
            logger.debug("Runner already stopped")
            return

        if self._state is not RunnerState.NOT_STARTED:
            try:
                await self.client.disconnect()
            except Exception as e:
                logger.debug("Error disconnecting remote client: %s", e)

        await self.supervisor.stop(self.options.kill_command, self.options.process_name)
        self._transition(RunnerState.STOPPED)

    async def __aenter__(self) -> Runner:
        try:
            await self.run()
        except BaseException:
            await self.stop()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
