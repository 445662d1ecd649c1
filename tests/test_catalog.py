import asyncio

import pytest

from tmusic_cli.api.client import CatalogClient, track_from_result
from tmusic_cli.exceptions import CatalogUnavailableError
from tmusic_cli.utils.formatting import (
    extract_artist_names,
    first_thumbnail_url,
    format_track_duration,
)

SEARCH_RESULTS = [
    {
        "resultType": "song",
        "videoId": "song001",
        "title": "First Song",
        "artists": [{"name": "Singer"}, {"name": "Guest"}],
        "duration_seconds": 187,
        "thumbnails": [{"url": "https://img.example/1.jpg"}],
    },
    {
        "resultType": "album",
        "browseId": "MPREb_album",
        "title": "Some Album",
    },
    {
        "resultType": "video",
        "videoId": "video01",
        "title": "Live Video",
        "artists": [],
        "duration_seconds": 65,
    },
    {
        "resultType": "artist",
        "browseId": "UCartist",
        "artist": "Singer",
    },
    {
        "resultType": "song",
        "videoId": None,
        "title": "Unavailable",
    },
]


class StubYTMusic:
    def __init__(self, results=None, error=None):
        self.results = SEARCH_RESULTS if results is None else results
        self.error = error
        self.queries = []

    def search(self, query, limit=20):
        self.queries.append((query, limit))
        if self.error is not None:
            raise self.error
        return self.results


def _ready_client(stub, **kwargs):
    client = CatalogClient(client_factory=lambda: stub, **kwargs)
    asyncio.run(client.initialize())
    return client


def test_format_track_duration():
    assert format_track_duration(187) == "3:07"
    assert format_track_duration(65.9) == "1:05"
    assert format_track_duration(3600) == "60:00"
    assert format_track_duration(None) == "0:00"
    assert format_track_duration(0) == "0:00"


def test_extract_artist_names():
    assert extract_artist_names({"artists": [{"name": "A"}, {"name": "B"}]}) == "A, B"
    assert extract_artist_names({"artists": [], "artist": "Solo"}) == "Solo"
    assert extract_artist_names({}) == "Unknown Artist"
    assert extract_artist_names({"artists": [{"id": "x"}]}, fallback="-") == "-"


def test_first_thumbnail_url():
    assert first_thumbnail_url(SEARCH_RESULTS[0]) == "https://img.example/1.jpg"
    assert first_thumbnail_url({"thumbnails": []}) is None


def test_track_from_result_fills_defaults():
    track = track_from_result({"videoId": "abc"})

    assert track.id == "abc"
    assert track.title == "Unknown Title"
    assert track.artist == "Unknown Artist"
    assert track.duration == "0:00"
    assert track.thumbnail_url is None


def test_search_keeps_only_playable_results_in_order():
    stub = StubYTMusic()
    client = _ready_client(stub, search_limit=7)

    tracks = asyncio.run(client.search("  first song "))

    assert [t.id for t in tracks] == ["song001", "video01"]
    assert tracks[0].artist == "Singer, Guest"
    assert tracks[0].duration == "3:07"
    assert tracks[1].artist == "Unknown Artist"
    assert tracks[1].url == "https://www.youtube.com/watch?v=video01"
    assert stub.queries == [("first song", 7)]


def test_search_blank_query_does_not_hit_catalog():
    stub = StubYTMusic()
    client = _ready_client(stub)

    assert asyncio.run(client.search("   ")) == []
    assert stub.queries == []


def test_search_failure_returns_empty_list():
    stub = StubYTMusic(error=ConnectionError("network down"))
    client = _ready_client(stub)

    assert asyncio.run(client.search("anything")) == []


def test_search_before_initialize_returns_empty_list():
    client = CatalogClient(client_factory=StubYTMusic)

    assert client.initialized is False
    assert asyncio.run(client.search("anything")) == []


def test_initialize_failure_raises_catalog_unavailable():
    def broken_factory():
        raise RuntimeError("cannot reach youtube")

    client = CatalogClient(client_factory=broken_factory)

    with pytest.raises(CatalogUnavailableError):
        asyncio.run(client.initialize())
    assert client.initialized is False
