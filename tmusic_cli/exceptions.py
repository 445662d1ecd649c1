"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class TmusicCliError(Exception):
    """Base exception for all application-specific errors."""


class CatalogUnavailableError(TmusicCliError):
    """Raised when the music catalog cannot be initialized or queried."""


class PlaybackError(TmusicCliError):
    """Base class for playback navigation errors reported to the user."""


class EmptyPlaylistError(PlaybackError):
    """Raised when a playback operation needs tracks but the playlist is empty."""

    def __init__(self, message: str = "Playlist is empty"):
        super().__init__(message)


class SinglePlaylistError(PlaybackError):
    """Raised when advancing is requested on a playlist holding a single track."""

    def __init__(self, message: str = "Only one track in playlist"):
        super().__init__(message)


class TrackIndexError(PlaybackError):
    """Raised when a track index falls outside the current playlist."""


class ConfigurationError(TmusicCliError):
    """Raised for issues related to configuration loading or validation."""


class InstallationError(TmusicCliError):
    """Raised when the external media player cannot be installed."""
