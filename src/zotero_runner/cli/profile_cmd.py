"""Profile preparation commands."""

from pathlib import Path

import typer
from rich.console import Console

from zotero_runner.config.loader import DEFAULT_CONFIG_PATH, load_config, save_config
from zotero_runner.config.schema import RunnerConfig
from zotero_runner.errors import ConfigurationError

console = Console()


def init_command(
    binary_path: str,
    profile_path: str,
    config_path: str | None = None,
    force: bool = False,
) -> None:
    """Write a starter config pointing at ``binary_path`` and ``profile_path``."""
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if path.exists() and not force:
        console.print(f"[yellow]Config already exists at {path}[/yellow]")
        console.print("Use [bold]--force[/bold] to overwrite.")
        raise typer.Exit(1)

    save_config(RunnerConfig(binary_path=binary_path, profile_path=profile_path), path)
    console.print(f"[green]Config written to {path}[/green]")


def prepare_command(config_path: str | None = None) -> None:
    """Prepare the development profile without starting Zotero."""
    from zotero_runner.plugins.installer import PluginInstaller
    from zotero_runner.profile.prefs import ProfileManager

    try:
        options = load_config(config_path).to_run_options()
        options.validate()
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    prefs_path = ProfileManager().prepare(options)
    console.print(f"[green]Preferences written to {prefs_path}[/green]")

    if options.as_proxy:
        PluginInstaller().install_proxy(options.profile_dir, options.plugins)
        for plugin in options.plugins:
            console.print(f"  proxy [cyan]{plugin.id}[/cyan] -> {plugin.path}")
