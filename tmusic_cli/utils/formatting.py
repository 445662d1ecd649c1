"""
Helper functions for formatting data into human-readable strings.
"""

from typing import Any


def format_track_duration(seconds: int | float | None) -> str:
    """Formats a track length in seconds as 'm:ss' (e.g., '3:07'). Missing -> '0:00'."""
    if not seconds:
        return "0:00"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


def extract_artist_names(result: dict[str, Any], fallback: str = "Unknown Artist") -> str:
    """
    Extracts artist names from a catalog search result.

    Args:
        result: A search result dictionary from the catalog.
        fallback: Returned when no artist name can be found.

    Returns:
        Comma-separated artist names or the fallback.
    """
    artists = result.get("artists") or []
    names = [a.get("name") for a in artists if isinstance(a, dict) and a.get("name")]
    if names:
        return ", ".join(names)
    if (artist := result.get("artist")) and isinstance(artist, str):
        return artist
    return fallback


def first_thumbnail_url(result: dict[str, Any]) -> str | None:
    thumbnails = result.get("thumbnails") or []
    if thumbnails and isinstance(thumbnails[0], dict):
        return thumbnails[0].get("url")
    return None
