"""Main CLI application using Typer."""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from zotero_runner import __version__

app = typer.Typer(
    name="zotero-runner",
    help="zotero-runner - run Zotero with plugins under development",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@app.command()
def version():
    """Show zotero-runner version."""
    console.print(f"zotero-runner version {__version__}")


@app.command()
def init(
    binary_path: str = typer.Option(..., "--binary", "-b", help="Path to the Zotero executable"),
    profile_path: str = typer.Option(..., "--profile", "-p", help="Development profile directory"),
    config_path: str = typer.Option(None, "--config", "-c", help="Where to write the config"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config"),
):
    """Write a starter configuration file."""
    from zotero_runner.cli.profile_cmd import init_command

    init_command(binary_path, profile_path, config_path=config_path, force=force)


@app.command()
def prepare(
    config_path: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: ./zotero-runner.yaml)",
    ),
):
    """Write prefs.js and, in proxy mode, install proxy plugins into the profile."""
    from zotero_runner.cli.profile_cmd import prepare_command

    prepare_command(config_path=config_path)


@app.command()
def kill(
    config_path: str = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """Force-kill running Zotero instances."""
    from zotero_runner.cli.process_cmd import kill_command

    kill_command(config_path=config_path)


@app.command()
def status(
    config_path: str = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """Check whether a Zotero instance is running."""
    from zotero_runner.cli.process_cmd import status_command

    status_command(config_path=config_path)
