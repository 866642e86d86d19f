"""Live reload of installed plugins.

Temporary installs are reloaded through the remote-control channel. Proxy
installs have no channel, so a reload script is delivered to the running host
through its ``zotero://`` protocol handler by launching the binary a second
time against the same profile. The second path is less reliable: launching the
binary in quick succession can crash the host, hence the settling delay.
Prefer temporary installs where possible.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from urllib.parse import quote

from zotero_runner.errors import ReloadError
from zotero_runner.options import PluginInfo, RunOptions, resolve_path
from zotero_runner.remote import RemoteControlClient

logger = logging.getLogger(__name__)

RELOAD_URL_PREFIX = "zotero://ztoolkit-debug/?run="
NOTIFICATION_CLOSE_MS = 5000
SIDE_CHANNEL_TIMEOUT_SECONDS = 30.0


@dataclass
class ReloadOutcome:
    """Result of reloading one plugin."""

    source_dir: str
    reload_error: ReloadError | None = None

    @property
    def ok(self) -> bool:
        return self.reload_error is None


@dataclass(frozen=True)
class ReloadPayload:
    """What to reload and how to label the confirmation."""

    addon_id: str
    name: str
    version: str
    build_stamp: str

    def to_script(self) -> str:
        """Render the privileged script the host runs for this reload."""
        addon_id = json.dumps(self.addon_id)
        headline = json.dumps(f"{self.name} Hot Reload")
        description = json.dumps(f"VERSION={self.version}, BUILD={self.build_stamp}.")
        return f"""
(async () => {{
  Services.obs.notifyObservers(null, "startupcache-invalidate", null);
  const {{ AddonManager }} = ChromeUtils.import("resource://gre/modules/AddonManager.jsm");
  const addon = await AddonManager.getAddonByID({addon_id});
  await addon.reload();
  const progressWindow = new Zotero.ProgressWindow({{ closeOnClick: true }});
  progressWindow.changeHeadline({headline});
  progressWindow.progress = new progressWindow.ItemProgress(
    "chrome://zotero/skin/tick.png",
    {description}
  );
  progressWindow.progress.setProgress(100);
  progressWindow.show();
  progressWindow.startCloseTimer({NOTIFICATION_CLOSE_MS});
}})()"""

    def to_url(self) -> str:
        return RELOAD_URL_PREFIX + quote(self.to_script(), safe="")


def build_reload_payload(plugin: PluginInfo, now: datetime | None = None) -> ReloadPayload:
    """Build the reload payload for ``plugin``. Pure; performs no I/O."""
    now = now or datetime.now()
    return ReloadPayload(
        addon_id=plugin.id,
        name=plugin.label,
        version=plugin.version or plugin.id,
        build_stamp=now.strftime("%Y-%m-%d %H:%M:%S"),
    )


class ProxyReloadChannel:
    """Delivers reload payloads by launching the host binary with a URL."""

    def __init__(self, binary_path: str, profile_path: str) -> None:
        self.binary_path = binary_path
        self.profile_path = profile_path

    def build_command(self, payload: ReloadPayload) -> list[str]:
        return [
            self.binary_path,
            "--purgecaches",
            "-profile",
            str(resolve_path(self.profile_path)),
            "-url",
            payload.to_url(),
        ]

    async def send(self, payload: ReloadPayload) -> None:
        """Hand ``payload`` to the running host and wait for the launcher to exit.

        Raises:
            ReloadError: If the launcher cannot be spawned, times out or exits non-zero
        """
        try:
            process = await asyncio.create_subprocess_exec(
                *self.build_command(payload),
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            raise ReloadError(f"Failed to deliver reload for '{payload.addon_id}': {e}") from e

        try:
            returncode = await asyncio.wait_for(
                process.wait(), timeout=SIDE_CHANNEL_TIMEOUT_SECONDS
            )
        except TimeoutError as e:
            process.kill()
            await process.wait()
            msg = (
                f"Reload launcher for '{payload.addon_id}' did not exit within "
                f"{SIDE_CHANNEL_TIMEOUT_SECONDS}s and was killed"
            )
            raise ReloadError(msg) from e

        if returncode != 0:
            raise ReloadError(
                f"Reload launcher for '{payload.addon_id}' exited with status {returncode}"
            )


class ReloadCoordinator:
    """Re-applies plugin code to a running host.

    Every batch returns one :class:`ReloadOutcome` per plugin, in declared
    order. Failures are captured in the outcome and never raised.
    """

    def __init__(
        self,
        options: RunOptions,
        client: RemoteControlClient | None,
        addon_ids: dict[str, str],
        channel: ProxyReloadChannel | None = None,
    ) -> None:
        self.options = options
        self.client = client
        self.addon_ids = addon_ids
        self.channel = channel or ProxyReloadChannel(options.binary_path, options.profile_path)

    async def reload_all(self) -> list[ReloadOutcome]:
        if self.options.as_proxy:
            outcomes = await self._reload_all_proxy()
        else:
            outcomes = await self._reload_all_temporary()

        for outcome in outcomes:
            if outcome.reload_error is not None:
                logger.error("%s", outcome.reload_error)
        return outcomes

    async def reload_by_id(self, addon_id: str) -> None:
        """Reload one temporary addon by its host-assigned id.

        Raises:
            ReloadError: If there is no client or the reload call fails
        """
        if self.client is None:
            raise ReloadError("Temporary reload requires a remote-control client")
        try:
            await self.client.reload_addon(addon_id)
        except Exception as e:
            raise ReloadError(f"Failed to reload '{addon_id}': {e}") from e
        logger.info("Reloaded addon '%s'", addon_id)

    async def reload_by_source_dir(self, source_dir: str) -> ReloadOutcome:
        """Reload the temporary addon installed from ``source_dir``."""
        key = str(resolve_path(source_dir))
        addon_id = self.addon_ids.get(key)
        if not addon_id:
            return ReloadOutcome(
                source_dir=source_dir,
                reload_error=ReloadError(
                    f'Extension not reloadable: no addon id has been mapped to "{source_dir}"'
                ),
            )

        try:
            await self.reload_by_id(addon_id)
        except ReloadError as e:
            return ReloadOutcome(source_dir=source_dir, reload_error=e)

        return ReloadOutcome(source_dir=source_dir)

    async def _reload_all_temporary(self) -> list[ReloadOutcome]:
        outcomes = []
        for plugin in self.options.plugins:
            outcomes.append(await self.reload_by_source_dir(plugin.source_dir))
        return outcomes

    async def reload_proxy(self, plugin: PluginInfo) -> ReloadOutcome:
        """Reload one proxy-installed plugin through the side channel."""
        try:
            await self.channel.send(build_reload_payload(plugin))
        except ReloadError as e:
            return ReloadOutcome(source_dir=plugin.source_dir, reload_error=e)
        logger.info("Sent reload request for '%s'", plugin.id)
        return ReloadOutcome(source_dir=plugin.source_dir)

    async def _reload_all_proxy(self) -> list[ReloadOutcome]:
        outcomes = []
        for plugin in self.options.plugins:
            outcomes.append(await self.reload_proxy(plugin))
            # Overlapping launches destabilize the host
            await asyncio.sleep(self.options.reload_settle_seconds)
        return outcomes
