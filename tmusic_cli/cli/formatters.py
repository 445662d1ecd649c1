"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tmusic_cli.models.config import PlayerConfig
from tmusic_cli.models.track import SessionStatus, Track


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "CatalogUnavailableError": [
            "• Check your internet connection.",
            "• YouTube Music may be temporarily unavailable.",
            "• Run `tmusic diagnose` to test connectivity.",
        ],
        "ConfigurationError": [
            "• Check the values in your configuration file.",
            "• Run `tmusic init --force` to write a fresh default config.",
        ],
        "InstallationError": [
            "• Install MPV manually: https://mpv.io/installation/",
            "• Run `tmusic setup` to retry the automatic installation.",
        ],
        "FileNotFoundError": [
            "• MPV could not be found on your PATH.",
            "• Run `tmusic setup` or set `mpv_path` in the configuration file.",
        ],
        "ClientConnectorError": [
            "• A network connection issue occurred.",
            "• Please try again in a few minutes.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration."""
    console = Console()
    content = ""
    for key, value in sorted(config_data.items()):
        content += f"{key} = {value}\n"

    source = config_path if config_path.is_file() else f"{config_path}, defaults"
    console.print(
        Panel(
            escape(content.strip()),
            title=f"Configuration ([dim]{escape(str(source))}[/dim])",
            border_style="cyan",
        )
    )


def build_main_menu(choices: list[tuple[str, str]]) -> Table:
    """Numbered table of the top-level menu entries."""
    table = Table(
        title="[bold blue]Music Player Menu[/bold blue]",
        show_header=False,
        box=box.ROUNDED,
        padding=(0, 1),
    )
    table.add_column(style="bold cyan", justify="right")
    table.add_column()
    for number, (_, label) in enumerate(choices, start=1):
        table.add_row(str(number), label)
    return table


def build_results_table(tracks: list[Track]) -> Table:
    """Search results, numbered from 1; 0 is reserved for cancel."""
    table = Table(
        title="[bold]Select a track to play[/bold]",
        box=box.SIMPLE_HEAVY,
        caption="[dim]0 = Cancel[/dim]",
    )
    table.add_column("#", style="bold cyan", justify="right")
    table.add_column("Title", style="white")
    table.add_column("Artist", style="magenta")
    table.add_column("Duration", style="dim", justify="right")
    for number, track in enumerate(tracks, start=1):
        table.add_row(
            str(number), escape(track.title), escape(track.artist), track.duration
        )
    return table


def build_playlist_table(status: SessionStatus) -> Table:
    """The loaded playlist with the current track marked."""
    table = Table(
        title="[bold blue]Current Playlist[/bold blue]",
        show_header=False,
        box=None,
        padding=(0, 1),
    )
    table.add_column(width=2)
    table.add_column()
    table.add_column(style="dim", justify="right")
    for index, track in enumerate(status.playlist):
        current = index == status.index
        table.add_row(
            "[bold green]▶[/bold green]" if current else "",
            f"[bold green]{escape(track.display_name)}[/bold green]"
            if current
            else escape(track.display_name),
            f"({track.duration})",
        )
    return table


def build_now_playing_panel(track: Track) -> Panel:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    table.add_row("Title:", escape(track.title))
    table.add_row("Artist:", escape(track.artist))
    table.add_row("Duration:", track.duration)
    return Panel(
        table,
        title="[bold green]Now Playing[/bold green]",
        border_style="green",
        expand=False,
    )


def print_validation_table(config: PlayerConfig, mpv_version: str | None):
    """Displays a summary of the effective settings used by `diagnose`."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("MPV:", escape(config.mpv_path))
    table.add_row(
        "MPV Version:",
        f"[green]{escape(mpv_version)}[/green]"
        if mpv_version
        else "[red]not available[/red]",
    )
    table.add_row("Video Host:", config.video_host)
    table.add_row("Search Limit:", str(config.search_limit))
    table.add_row(
        "Delays:",
        f"settle {config.settle_delay}s • advance {config.advance_delay}s • "
        f"retry {config.spawn_retry_delay}s • kill {config.kill_grace_period}s",
    )

    console.print(
        Panel(table, title="[bold]Player Settings[/bold]", border_style="cyan")
    )
