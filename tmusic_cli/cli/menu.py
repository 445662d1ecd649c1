"""
Interactive menu that drives the playback session from the terminal.
"""

import asyncio
import logging
import threading
from collections.abc import Callable
from contextlib import suppress
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from tmusic_cli.api.client import CatalogClient
from tmusic_cli.core.session import PlaybackSession
from tmusic_cli.exceptions import PlaybackError

from .formatters import (
    build_main_menu,
    build_now_playing_panel,
    build_playlist_table,
    build_results_table,
)

log = logging.getLogger(__name__)

MENU_CHOICES = [
    ("search", "Search and play music"),
    ("show", "Show current playlist"),
    ("now", "Now playing"),
    ("next", "Play next track"),
    ("prev", "Play previous track"),
    ("stop", "Stop playback"),
    ("exit", "Exit"),
]


async def ask_in_thread(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """
    Runs a blocking prompt in a daemon thread and awaits its answer.

    The event loop keeps serving player callbacks meanwhile, and a prompt still
    waiting for input never holds up interpreter exit.
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def deliver(setter: Callable[[Any], None], value: Any) -> None:
        if not future.done():
            setter(value)

    def worker() -> None:
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            outcome = (future.set_exception, e)
        else:
            outcome = (future.set_result, result)
        # Loop may be gone if the program exited while we waited
        with suppress(RuntimeError):
            loop.call_soon_threadsafe(deliver, *outcome)

    threading.Thread(target=worker, name="tmusic-prompt", daemon=True).start()
    return await future


class MenuController:
    """Renders the menu, reads choices and calls into the session and catalog."""

    def __init__(
        self,
        session: PlaybackSession,
        catalog: CatalogClient,
        console: Console | None = None,
    ):
        self.session = session
        self.catalog = catalog
        self.console = console or Console()

    async def ask(
        self,
        message: str,
        choices: list[str] | None = None,
        default: str | None = None,
    ) -> str:
        """Prompts for one line of input. Raises EOFError when input is closed."""
        kwargs: dict[str, Any] = {"console": self.console}
        if choices is not None:
            kwargs["choices"] = choices
            kwargs["show_choices"] = False
        if default is not None:
            kwargs["default"] = default
        return await ask_in_thread(Prompt.ask, message, **kwargs)

    async def run(self) -> int:
        """Main loop. Returns the exit code once the user chooses to exit."""
        numbers = [str(n) for n in range(1, len(MENU_CHOICES) + 1)]
        while True:
            self.console.print()
            self.console.print(build_main_menu(MENU_CHOICES))
            try:
                choice = await self.ask("Choose an option", choices=numbers)
            except EOFError:
                return 0

            action = MENU_CHOICES[int(choice) - 1][0]
            if action == "exit":
                return 0
            try:
                await self.handle(action)
            except EOFError:
                return 0

    async def handle(self, action: str) -> None:
        if action == "search":
            await self.search_and_play()
        elif action == "show":
            self.show_playlist()
        elif action == "now":
            self.now_playing()
        elif action == "next":
            self._navigate(self.session.play_next)
        elif action == "prev":
            self._navigate(self.session.play_previous)
        elif action == "stop":
            self.session.stop()
            self.console.print("[yellow]Playback stopped[/yellow]")
        else:
            log.debug(f"Unknown menu action: {action}")

    def _navigate(self, operation: Callable[[], bool]) -> None:
        try:
            operation()
        except PlaybackError as e:
            self.console.print(f"[yellow]{escape(str(e))}[/yellow]")

    async def search_and_play(self) -> bool:
        """
        Asks for a query, lets the user pick a result and plays it.

        The playlist is replaced only when a track is actually selected.

        Returns:
            True if playback of a selected track was started.
        """
        query = await self.ask("Enter search query")

        with self.console.status("[cyan]Searching...[/cyan]"):
            results = await self.catalog.search(query)

        if not results:
            self.console.print("\n[red]No results found[/red]")
            return False

        self.console.print(build_results_table(results))
        choices = [str(n) for n in range(len(results) + 1)]
        selected = int(
            await self.ask("Select a track to play", choices=choices, default="0")
        )
        if selected == 0:
            return False

        index = selected - 1
        self.session.load_playlist(results, index)
        return self.session.play(index)

    def show_playlist(self) -> None:
        status = self.session.status()
        if not status.playlist:
            self.console.print("\n[yellow]Playlist is empty[/yellow]")
            return
        self.console.print(build_playlist_table(status))

    def now_playing(self) -> None:
        status = self.session.status()
        if not status.is_playing or status.track is None:
            self.console.print("\n[yellow]No track is currently playing[/yellow]")
            return
        self.console.print(build_now_playing_panel(status.track))
