"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from tmusic_cli import __version__
from tmusic_cli.api.client import CatalogClient, check_connectivity
from tmusic_cli.core.session import PlaybackSession
from tmusic_cli.core.shutdown import ShutdownCoordinator
from tmusic_cli.exceptions import CatalogUnavailableError, TmusicCliError
from tmusic_cli.installer.mpv import MpvInstaller
from tmusic_cli.models.config import PlayerConfig
from tmusic_cli.storage.config_manager import ConfigManager

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_validation_table,
)
from .menu import MenuController

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("tmusic_cli")

app = typer.Typer(
    name="tmusic",
    help=(
        "Search YouTube Music and play it in your terminal through MPV. Use"
        " 'tmusic <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "tmusic-cli"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config() -> PlayerConfig:
    try:
        return ConfigManager(CONFIG_FILE).load_config()
    except TmusicCliError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """Terminal Music Player"""
    if version:
        console.print(f"[bold]tmusic-cli[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("tmusic_cli").setLevel(log_level)

    if show_config:
        try:
            config_data = ConfigManager(CONFIG_FILE).get_config_as_dict()
        except TmusicCliError as e:
            console.print(format_error_with_suggestions(e))
            raise typer.Exit(code=1) from e
        print_config(CONFIG_FILE, config_data)
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        play()


async def run_player(config: PlayerConfig, catalog: CatalogClient | None = None) -> int:
    """
    Runs the interactive player until the user exits or the process is told to stop.

    Returns:
        The exit code: 0 for a normal exit, 1 for initialization failures and faults.
    """
    session = PlaybackSession(config)
    coordinator = ShutdownCoordinator(session)
    coordinator.install()
    try:
        catalog = catalog or CatalogClient(search_limit=config.search_limit)
        try:
            await catalog.initialize()
        except CatalogUnavailableError as e:
            console.print(format_error_with_suggestions(e))
            return 1
        console.print("[green]✓ YouTube Music catalog initialized successfully![/green]")
        console.print("\n[bold blue]🎵 CLI Music Player[/bold blue]\n")

        menu = MenuController(session, catalog, console)
        exit_code = await coordinator.run(menu.run())
        if exit_code == 0:
            console.print("[green]Goodbye![/green]")
        return exit_code
    finally:
        coordinator.cleanup()
        coordinator.uninstall()


@app.command()
def play():
    """Start the interactive music player."""
    config = _load_config()

    installer = MpvInstaller(console=console, mpv_path=config.mpv_path)
    if not installer.is_installed():
        console.print(
            f"[yellow]⚠️  MPV was not found ('{config.mpv_path}'). Playback will fail"
            " until it is installed.[/yellow]"
        )
        console.print("Run [cyan]tmusic setup[/cyan] to install it automatically.\n")

    exit_code = asyncio.run(run_player(config))
    raise typer.Exit(code=exit_code)


@app.command()
def setup():
    """Check system requirements and install the MPV media player."""
    config = _load_config()
    installer = MpvInstaller(console=console, mpv_path=config.mpv_path)

    async def _setup_async() -> bool:
        await installer.check_system_requirements()
        return await installer.install()

    console.print("[bold blue]🎵 Terminal Music Player - Setup[/bold blue]\n")
    if asyncio.run(_setup_async()):
        console.print("\n[bold green]🎉 Installation completed successfully![/bold green]")
        console.print("Run [cyan]tmusic[/cyan] to start the music player.")
    else:
        console.print("\n[bold red]❌ Installation incomplete.[/bold red]")
        console.print("Please install MPV manually and try again.")
        raise typer.Exit(code=1)


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing config without asking."
    ),
):
    """Write a configuration file with default settings."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    try:
        ConfigManager(CONFIG_FILE).save_new_config()
    except TmusicCliError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


@app.command()
def diagnose():
    """Diagnose common configuration, player and connectivity issues."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    issues_found = False

    if CONFIG_FILE.is_file():
        console.print(f"[green]✓[/] Config file exists at: [dim]{CONFIG_FILE}[/dim]")
    else:
        console.print(
            "[yellow]⚠️  No config file found, defaults are used.[/] Run"
            " [cyan]tmusic init[/cyan] to create one."
        )

    try:
        config = ConfigManager(CONFIG_FILE).load_config()
        console.print("[green]✓[/] Configuration is valid and can be loaded.")
    except TmusicCliError as e:
        console.print(f"[red]✗ Configuration validation failed: {e}[/red]")
        config = PlayerConfig()
        issues_found = True

    installer = MpvInstaller(console=console, mpv_path=config.mpv_path)
    mpv_version = None
    if installer.is_installed():
        mpv_version = asyncio.run(installer.get_version())
        console.print("[green]✓[/] MPV is installed.")
    else:
        console.print(
            "[red]✗ MPV not found.[/] Run [cyan]tmusic setup[/cyan] to install it."
        )
        issues_found = True

    console.print("\n[dim]Testing connectivity to YouTube Music...[/dim]")
    connected, detail = asyncio.run(check_connectivity())
    if connected:
        console.print(f"[green]✓[/] {detail}")
    else:
        console.print(f"[red]✗ {detail}[/red]")
        issues_found = True

    console.print()
    print_validation_table(config, mpv_version)
    console.print()
    if not issues_found:
        console.print(
            "[bold green]✓ All checks passed! Your setup looks good.[/bold green]\n"
        )
    else:
        console.print(
            "[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
        raise typer.Exit(code=1)
