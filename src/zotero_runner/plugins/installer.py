"""Plugin installation strategies.

Two strategies, chosen once per run by ``RunOptions.as_proxy``:

- temporary: installed through the remote-control channel into the running
  host; lost when the host exits
- proxy: a pointer file in the profile's extensions directory plus a patch to
  the host's activation state, picked up when the host starts
"""

from __future__ import annotations

import logging
from pathlib import Path

from zotero_runner.errors import InstallError
from zotero_runner.options import PluginInfo
from zotero_runner.profile.extensions import activate_addons, write_proxy_file
from zotero_runner.remote import RemoteControlClient

logger = logging.getLogger(__name__)


class PluginInstaller:
    """Installs plugins and records the ids the host assigns."""

    def __init__(self, client: RemoteControlClient | None = None) -> None:
        self.client = client
        # resolved source dir -> id assigned by the host
        self.addon_ids: dict[str, str] = {}

    async def install_temporary(self, plugins: list[PluginInfo]) -> dict[str, str]:
        """Install each plugin as a temporary addon, one at a time, in order.

        The control channel is not assumed to be safe for concurrent calls.

        Returns:
            The AddonIdMapping (resolved source dir -> assigned id)

        Raises:
            InstallError: If an install call fails or returns no id
        """
        if self.client is None:
            raise InstallError("Temporary install requires a remote-control client")

        for plugin in plugins:
            source_dir = str(plugin.path)
            try:
                addon_id = await self.client.install_temporary_addon(source_dir)
            except Exception as e:
                msg = f"Failed to install '{plugin.id}' from {source_dir}: {e}"
                raise InstallError(msg) from e

            if not addon_id:
                raise InstallError(
                    f"Unexpected missing addon id in the install result for {source_dir}"
                )

            self.addon_ids[source_dir] = addon_id
            logger.info("Installed temporary addon '%s' from %s", addon_id, source_dir)

        return dict(self.addon_ids)

    def install_proxy(self, profile_dir: Path, plugins: list[PluginInfo]) -> None:
        """Install each plugin as a proxy file in ``profile_dir``.

        Runs before the host starts. Writes no state to the control channel.
        """
        for plugin in plugins:
            write_proxy_file(profile_dir, plugin.id, plugin.path)
            activate_addons(profile_dir, {plugin.id})
            logger.info("Installed proxy addon '%s' -> %s", plugin.id, plugin.path)
