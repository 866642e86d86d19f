"""Pydantic models for zotero-runner.yaml configuration."""

from pydantic import BaseModel, Field

from zotero_runner.options import PluginInfo, RunOptions


class PluginConfig(BaseModel):
    """A plugin under development."""

    id: str = Field(description="Extension id from the plugin's manifest.json")
    source_dir: str = Field(description="Build directory containing manifest.json")
    name: str | None = Field(default=None, description="Label for reload notifications")
    version: str | None = Field(default=None, description="Version shown on reload")


class RunnerConfig(BaseModel):
    """Root configuration model."""

    binary_path: str = Field(description="Path to the host executable")
    profile_path: str = Field(description="Profile directory used for development runs")
    data_dir: str = Field(default="", description="Data directory passed as --dataDir")
    prefs: dict[str, str | int | float | bool] = Field(
        default_factory=dict,
        description="Preference overrides written after the defaults",
    )
    plugins: list[PluginConfig] = Field(default_factory=list)
    as_proxy: bool = Field(
        default=False,
        description="Install plugins as proxy files instead of temporary addons",
    )
    devtools: bool = Field(default=False, description="Start with the JavaScript debugger")
    binary_args: list[str] = Field(default_factory=list, description="Extra host arguments")
    kill_command: str | None = Field(
        default=None,
        description="Shell command used to force-kill the host (overrides platform default)",
    )
    process_name: str = Field(default="zotero", description="Host process name")
    reload_settle_seconds: float = Field(
        default=2.0,
        description="Pause after each proxy-mode reload",
        ge=0.0,
    )

    def to_run_options(self) -> RunOptions:
        return RunOptions(
            binary_path=self.binary_path,
            profile_path=self.profile_path,
            data_dir=self.data_dir,
            custom_prefs=dict(self.prefs),
            plugins=[
                PluginInfo(id=p.id, source_dir=p.source_dir, name=p.name, version=p.version)
                for p in self.plugins
            ],
            as_proxy=self.as_proxy,
            devtools=self.devtools,
            binary_args=list(self.binary_args),
            kill_command=self.kill_command,
            process_name=self.process_name,
            reload_settle_seconds=self.reload_settle_seconds,
        )
