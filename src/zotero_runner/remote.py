"""Remote-control channel contract.

The host exposes the Firefox remote debugging protocol on the port passed with
``-start-debugger-server``. This package does not speak that protocol itself;
callers inject an object satisfying :class:`RemoteControlClient`.
"""

from typing import Protocol


class RemoteControlClient(Protocol):
    """Protocol for remote-control clients used by the runner."""

    async def connect(self, port: int) -> None:
        """Connect to the host's debugger server.

        Args:
            port: TCP port on localhost

        Raises:
            Exception: Any failure; the runner treats it as fatal
        """
        ...

    async def install_temporary_addon(self, addon_path: str) -> str | None:
        """Install an unpackaged extension for the lifetime of the host process.

        Args:
            addon_path: Absolute path of the extension build directory

        Returns:
            Id the host assigned to the extension
        """
        ...

    async def reload_addon(self, addon_id: str) -> None:
        """Reload a previously installed extension."""
        ...

    async def disconnect(self) -> None:
        """Close the connection. Must be safe to call when not connected."""
        ...
