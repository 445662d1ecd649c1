"""
Async wrapper around the YouTube Music catalog used to find playable tracks.
"""

import asyncio
import logging
from typing import Any, Callable

import aiohttp
from ytmusicapi import YTMusic

from tmusic_cli.exceptions import CatalogUnavailableError
from tmusic_cli.models.track import Track
from tmusic_cli.utils.formatting import (
    extract_artist_names,
    first_thumbnail_url,
    format_track_duration,
)

log = logging.getLogger(__name__)

# Result types that carry a playable audio stream
PLAYABLE_RESULT_TYPES = ("song", "video")


def track_from_result(result: dict[str, Any]) -> Track:
    """Maps a raw catalog search result onto a Track."""
    return Track(
        id=result["videoId"],
        title=result.get("title") or "Unknown Title",
        artist=extract_artist_names(result),
        duration=format_track_duration(result.get("duration_seconds")),
        thumbnail_url=first_thumbnail_url(result),
    )


class CatalogClient:
    """
    Search client for the YouTube Music catalog.

    The underlying ytmusicapi client is synchronous, so every call runs in a
    worker thread to keep the event loop free for playback callbacks.
    """

    BASE_URL = "https://music.youtube.com"

    def __init__(
        self,
        search_limit: int = 20,
        client_factory: Callable[[], Any] = YTMusic,
    ):
        """
        Args:
            search_limit: Maximum number of results requested per query.
            client_factory: Builds the catalog client. Unauthenticated by default.
        """
        self.search_limit = search_limit
        self._client_factory = client_factory
        self._client: Any | None = None

    @property
    def initialized(self) -> bool:
        return self._client is not None

    async def initialize(self) -> None:
        """
        Creates the catalog client.

        Raises:
            CatalogUnavailableError: If the client cannot be constructed.
        """
        try:
            self._client = await asyncio.to_thread(self._client_factory)
        except Exception as e:
            raise CatalogUnavailableError(
                f"Could not initialize the music catalog: {e}"
            ) from e
        log.debug("Catalog client initialized.")

    async def search(self, query: str) -> list[Track]:
        """
        Searches the catalog and returns playable tracks in result order.

        Failures are logged and reported as an empty result list.
        """
        query = (query or "").strip()
        if not query:
            return []
        if self._client is None:
            log.error("[red]Catalog client is not initialized.[/red]")
            return []

        try:
            results = await asyncio.to_thread(
                self._client.search, query, limit=self.search_limit
            )
        except Exception as e:
            log.error(f"[red]Error searching tracks: {e}[/red]")
            log.debug("Full traceback:", exc_info=True)
            return []

        tracks = [
            track_from_result(result)
            for result in results or []
            if result.get("resultType") in PLAYABLE_RESULT_TYPES
            and result.get("videoId")
        ]
        log.debug(f"Search '{query}' returned {len(tracks)} playable tracks.")
        return tracks


async def check_connectivity(url: str = CatalogClient.BASE_URL) -> tuple[bool, str]:
    """Probes the catalog host. Returns (reachable, human-readable detail)."""
    try:
        timeout = aiohttp.ClientTimeout(total=10)
        async with (
            aiohttp.ClientSession(timeout=timeout) as session,
            session.get(url) as resp,
        ):
            if resp.status == 200:
                return True, f"Connected to {url}"
            return False, f"Could not connect to {url} (Status: {resp.status})"
    except Exception as e:
        return False, f"Connection test failed: {e}"
