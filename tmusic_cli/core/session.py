"""
Playback session: playlist navigation plus the lifecycle of the single
external player process.

All transitions run on the event loop thread. Delays (settle, auto-advance,
spawn retry, forced kill) are loop timer handles, never blocking waits.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from rich.markup import escape

from tmusic_cli.exceptions import (
    EmptyPlaylistError,
    PlaybackError,
    SinglePlaylistError,
    TrackIndexError,
)
from tmusic_cli.models.config import PlayerConfig
from tmusic_cli.models.track import PlaybackState, SessionStatus, Track

from .process import build_player_args, spawn_player

log = logging.getLogger(__name__)

Spawner = Callable[[list[str]], Awaitable[Any]]


class PlaybackSession:
    """
    Owns the playlist, the current index and at most one live player process.

    A `play` call while a previous start is still settling is rejected rather
    than queued. Replacing a track signals the old process and drops its handle
    without waiting for it to exit, so for a short window two OS processes may
    coexist; exit events from a dropped handle are ignored.
    """

    def __init__(
        self,
        config: PlayerConfig | None = None,
        spawner: Spawner = spawn_player,
    ):
        self.config = config or PlayerConfig()
        self._spawner = spawner

        self._playlist: tuple[Track, ...] = ()
        self._index = 0

        self._state = PlaybackState.IDLE
        self._process: Any | None = None
        self._auto_advance = True
        self._transitioning = False

        # Bumped whenever an in-flight spawn must not become current
        self._generation = 0
        self._settle_handle: asyncio.TimerHandle | None = None
        self._advance_handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()

    # Read-only views
    @property
    def playlist(self) -> tuple[Track, ...]:
        return self._playlist

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def process(self) -> Any | None:
        return self._process

    @property
    def auto_advance(self) -> bool:
        return self._auto_advance

    @property
    def transitioning(self) -> bool:
        return self._transitioning

    @property
    def advance_pending(self) -> bool:
        return self._advance_handle is not None

    def status(self) -> SessionStatus:
        """Snapshot of the session. Has no side effects."""
        track = self._playlist[self._index] if self._playlist else None
        return SessionStatus(
            state=self._state,
            track=track,
            playlist=self._playlist,
            index=self._index,
        )

    def load_playlist(self, tracks: Sequence[Track], start_index: int = 0) -> None:
        """Replaces the playlist and index. Does not start playback."""
        tracks = tuple(tracks)
        if tracks and not 0 <= start_index < len(tracks):
            raise TrackIndexError(
                f"Start index {start_index} is outside a playlist of {len(tracks)}."
            )
        self._playlist = tracks
        self._index = start_index if tracks else 0
        log.debug(f"Loaded playlist with {len(tracks)} tracks at index {self._index}.")

    # Playback operations
    def play(self, index: int) -> bool:
        """
        Starts the track at `index`, replacing whatever is playing.

        Returns immediately. Returns False when another start is still settling.

        Raises:
            EmptyPlaylistError: If there is nothing to play.
            TrackIndexError: If `index` is out of range.
        """
        if not self._playlist:
            raise EmptyPlaylistError()
        if not 0 <= index < len(self._playlist):
            raise TrackIndexError(
                f"Track index {index} is outside a playlist of {len(self._playlist)}."
            )
        if self._transitioning:
            log.warning("[yellow]Track transition in progress, please wait...[/yellow]")
            return False

        loop = asyncio.get_running_loop()
        self._transitioning = True
        self._cancel_advance()
        self._generation += 1

        previous, self._process = self._process, None
        if previous is not None and previous.returncode is None:
            self._teardown(previous)

        self._index = index
        track = self._playlist[index]
        self._auto_advance = True
        self._state = PlaybackState.STARTING

        log.info(
            f"[bold yellow]Now Playing:[/bold yellow] {escape(track.display_name)}"
        )
        log.info(f"[dim]Duration: {track.duration}[/dim]")

        self._start_task(self._run_player(track, self._generation))

        if self._settle_handle is not None:
            self._settle_handle.cancel()
        self._settle_handle = loop.call_later(
            self.config.settle_delay, self._end_transition
        )
        return True

    def play_next(self) -> bool:
        """Advances circularly and plays. Needs at least two tracks."""
        length = len(self._playlist)
        if length == 0:
            raise EmptyPlaylistError()
        if length == 1:
            raise SinglePlaylistError()

        old_index = self._index
        new_index = (old_index + 1) % length
        if new_index == old_index:
            log.warning("[yellow]Reached end of playlist[/yellow]")
            return False
        return self.play(new_index)

    def play_previous(self) -> bool:
        """Steps back circularly and plays."""
        if not self._playlist:
            raise EmptyPlaylistError()

        new_index = self._index - 1
        if new_index < 0:
            new_index = len(self._playlist) - 1
        return self.play(new_index)

    def stop(self) -> None:
        """Stops playback without chaining to the next track. Idempotent."""
        self._auto_advance = False
        self._cancel_advance()
        self.cleanup()

    def cleanup(self) -> None:
        """
        Releases the player process. Never raises and is safe to call repeatedly,
        including from signal handlers and exit hooks.

        The process gets a graceful terminate now and a forced kill after the
        grace period if it is still alive; the caller does not wait for either.
        """
        self._generation += 1
        self._cancel_advance()

        process, self._process = self._process, None
        if process is not None and process.returncode is None:
            self._state = PlaybackState.STOPPING
            log.debug("Stopping player process.")
            self._teardown(process)

        if self._settle_handle is not None:
            self._settle_handle.cancel()
            self._settle_handle = None
        self._state = PlaybackState.IDLE
        self._transitioning = False

    # Process lifecycle
    async def _run_player(self, track: Track, generation: int) -> None:
        args = build_player_args(track, self.config)
        try:
            process = await self._spawner(args)
        except OSError as e:
            if generation != self._generation:
                return
            log.error(f"[red]MPV Error: {e}[/red]")
            self._state = PlaybackState.IDLE
            self._transitioning = False
            if self._auto_advance and len(self._playlist) > 1:
                self._schedule_advance(self.config.spawn_retry_delay)
            return

        if generation != self._generation:
            log.debug("Discarding player spawned for a superseded request.")
            self._teardown(process)
            return

        self._process = process
        self._state = PlaybackState.PLAYING

        returncode = await process.wait()
        self._on_exit(process, returncode)

    def _on_exit(self, process: Any, returncode: int | None) -> None:
        if process is not self._process:
            log.debug(f"Ignoring exit of a replaced player (code {returncode}).")
            return

        self._process = None
        self._state = PlaybackState.IDLE
        self._transitioning = False

        if returncode == 0:
            log.info("[dim]Track finished playing[/dim]")
        elif returncode is not None and returncode > 0:
            log.error(f"[red]Track stopped with code: {returncode}[/red]")

        # Negative codes mean the player was killed by a signal
        if self._auto_advance and returncode == 0 and len(self._playlist) > 1:
            self._schedule_advance(self.config.advance_delay)

    def _teardown(self, process: Any) -> None:
        try:
            process.terminate()
        except Exception as e:
            log.error(f"[red]Error stopping MPV: {e}[/red]")
            try:
                process.kill()
            except Exception as kill_error:
                log.error(f"[red]Error force killing MPV: {kill_error}[/red]")
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Interpreter exit path; nothing left to run the escalation
            return
        loop.call_later(self.config.kill_grace_period, self._force_kill, process)

    def _force_kill(self, process: Any) -> None:
        if process.returncode is not None:
            return
        log.warning("[red]Force killing MPV process...[/red]")
        try:
            process.kill()
        except Exception as e:
            log.error(f"[red]Error force killing MPV: {e}[/red]")

    # Timers
    def _end_transition(self) -> None:
        self._settle_handle = None
        self._transitioning = False

    def _schedule_advance(self, delay: float) -> None:
        self._cancel_advance()
        loop = asyncio.get_running_loop()
        self._advance_handle = loop.call_later(delay, self._advance)

    def _cancel_advance(self) -> None:
        if self._advance_handle is not None:
            self._advance_handle.cancel()
            self._advance_handle = None

    def _advance(self) -> None:
        self._advance_handle = None
        try:
            self.play_next()
        except PlaybackError as e:
            log.warning(f"[yellow]{escape(str(e))}[/yellow]")

    def _start_task(self, coro: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
