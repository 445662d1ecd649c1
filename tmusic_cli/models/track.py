"""
Data structures describing catalog tracks and the state of a playback session.
"""

from dataclasses import dataclass
from enum import Enum

WATCH_URL_TEMPLATE = "https://{host}/watch?v={video_id}"


@dataclass(frozen=True)
class Track:
    """A playable catalog entry. Immutable once built from a search result."""

    id: str
    title: str
    artist: str
    duration: str = "0:00"
    thumbnail_url: str | None = None

    def watch_url(self, host: str = "www.youtube.com") -> str:
        """Playable URL for the external player."""
        return WATCH_URL_TEMPLATE.format(host=host, video_id=self.id)

    @property
    def url(self) -> str:
        return self.watch_url()

    @property
    def display_name(self) -> str:
        return f"{self.title} - {self.artist}"


class PlaybackState(Enum):
    """States of a playback session."""

    IDLE = "idle"
    STARTING = "starting"
    PLAYING = "playing"
    STOPPING = "stopping"


@dataclass(frozen=True)
class SessionStatus:
    """Read-only snapshot of a playback session."""

    state: PlaybackState
    track: Track | None
    playlist: tuple[Track, ...]
    index: int

    @property
    def is_playing(self) -> bool:
        return self.state in (PlaybackState.STARTING, PlaybackState.PLAYING)
