"""
Data Models Layer.

This package contains the data structures used throughout the application:
the validated player configuration, catalog tracks and session snapshots.
"""

from .config import PlayerConfig
from .track import PlaybackState, SessionStatus, Track

__all__ = ["PlaybackState", "PlayerConfig", "SessionStatus", "Track"]
