"""Plugin installation and live reload."""

from zotero_runner.plugins.installer import PluginInstaller
from zotero_runner.plugins.reload import (
    ProxyReloadChannel,
    ReloadCoordinator,
    ReloadOutcome,
    ReloadPayload,
    build_reload_payload,
)

__all__ = [
    "PluginInstaller",
    "ProxyReloadChannel",
    "ReloadCoordinator",
    "ReloadOutcome",
    "ReloadPayload",
    "build_reload_payload",
]
