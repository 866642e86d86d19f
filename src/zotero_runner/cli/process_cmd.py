"""Host process commands."""

import asyncio

import typer
from rich.console import Console

from zotero_runner.config.loader import load_config
from zotero_runner.errors import ConfigurationError
from zotero_runner.process.termination import force_kill, is_process_running

console = Console()


def _kill_settings(config_path: str | None) -> tuple[str | None, str]:
    """Return ``(kill_command, process_name)``, with defaults when no config exists."""
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        if config_path:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1) from e
        return None, "zotero"
    return config.kill_command, config.process_name


def kill_command(config_path: str | None = None) -> None:
    """Force-kill running host instances."""
    kill_cmd, process_name = _kill_settings(config_path)
    result = asyncio.run(force_kill(kill_cmd, process_name))

    if result is None:
        console.print("[red]Kill command could not be run.[/red]")
    elif result.ok:
        console.print(f"[green]Killed {process_name}.[/green]")
    else:
        console.print(f"[yellow]No {process_name} instance is currently running.[/yellow]")


def status_command(config_path: str | None = None) -> None:
    """Report whether the host is running."""
    _, process_name = _kill_settings(config_path)
    if is_process_running(process_name):
        console.print(f"[green]{process_name} is running[/green]")
    else:
        console.print(f"[yellow]{process_name} is not running[/yellow]")
