"""Run options and plugin descriptors."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from zotero_runner.errors import ConfigurationError

PrefValue = str | int | float | bool


def resolve_path(path: str | Path) -> Path:
    """Return the absolute, normalized form of ``path``."""
    return Path(path).expanduser().resolve()


@dataclass(frozen=True)
class PluginInfo:
    """A plugin under development.

    ``source_dir`` is the plugin's build directory (the one containing
    ``manifest.json``). ``name`` and ``version`` only label the proxy-mode
    reload notification and default to the id.
    """

    id: str
    source_dir: str
    name: str | None = None
    version: str | None = None

    @property
    def path(self) -> Path:
        """Absolute build directory."""
        return resolve_path(self.source_dir)

    @property
    def label(self) -> str:
        return self.name or self.id


@dataclass
class RunOptions:
    """Everything needed to run one development session."""

    binary_path: str
    profile_path: str
    data_dir: str = ""
    custom_prefs: dict[str, PrefValue] = field(default_factory=dict)
    plugins: list[PluginInfo] = field(default_factory=list)
    as_proxy: bool = False
    devtools: bool = False
    binary_args: list[str] = field(default_factory=list)
    kill_command: str | None = None
    process_name: str = "zotero"
    reload_settle_seconds: float = 2.0

    def validate(self) -> None:
        """Check the invariants that must hold before any side effect.

        Raises:
            ConfigurationError: If a required path is empty or plugin ids repeat
        """
        if not self.binary_path:
            raise ConfigurationError("binary_path is required")
        if not self.profile_path:
            raise ConfigurationError("profile_path is required")

        seen: set[str] = set()
        for plugin in self.plugins:
            if not plugin.id:
                raise ConfigurationError(f"Plugin at {plugin.source_dir!r} has no id")
            if not plugin.source_dir:
                raise ConfigurationError(f"Plugin '{plugin.id}' has no source_dir")
            if plugin.id in seen:
                raise ConfigurationError(f"Duplicate plugin id: {plugin.id}")
            seen.add(plugin.id)

    @property
    def profile_dir(self) -> Path:
        return resolve_path(self.profile_path)

    @property
    def data_path(self) -> Path | None:
        return resolve_path(self.data_dir) if self.data_dir else None
