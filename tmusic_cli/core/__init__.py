"""
Core playback engine.

The `PlaybackSession` owns the playlist and the single external player
process; the `ShutdownCoordinator` makes sure that process is released on
every exit path.
"""

from .process import build_player_args, spawn_player
from .session import PlaybackSession
from .shutdown import ShutdownCoordinator

__all__ = [
    "PlaybackSession",
    "ShutdownCoordinator",
    "build_player_args",
    "spawn_player",
]
