import asyncio
import io

from conftest import settle, tick
from rich.console import Console

from tmusic_cli.cli.menu import MENU_CHOICES, MenuController, ask_in_thread
from tmusic_cli.core.session import PlaybackSession
from tmusic_cli.models.track import PlaybackState


class StubCatalog:
    def __init__(self, results):
        self.results = results
        self.queries = []

    async def search(self, query):
        self.queries.append(query)
        return list(self.results)


class ScriptedMenu(MenuController):
    """Answers prompts from a list; raises EOFError when the script runs out."""

    def __init__(self, session, catalog, answers):
        super().__init__(session, catalog, Console(file=io.StringIO(), width=120))
        self.answers = list(answers)
        self.prompts = []

    async def ask(self, message, choices=None, default=None):
        self.prompts.append(message)
        if not self.answers:
            raise EOFError
        answer = self.answers.pop(0)
        if choices is not None:
            assert answer in choices
        return answer

    @property
    def output(self):
        return self.console.file.getvalue()


def _option(action):
    return str([key for key, _ in MENU_CHOICES].index(action) + 1)


def test_exit_option_returns_zero(fast_config, spawner):
    async def scenario():
        menu = ScriptedMenu(PlaybackSession(fast_config, spawner=spawner), None, [])
        menu.answers = [_option("exit")]
        return await menu.run(), menu

    code, menu = asyncio.run(scenario())
    assert code == 0
    assert "Music Player Menu" in menu.output


def test_closed_input_returns_zero(fast_config, spawner):
    async def scenario():
        menu = ScriptedMenu(PlaybackSession(fast_config, spawner=spawner), None, [])
        return await menu.run()

    assert asyncio.run(scenario()) == 0


def test_search_select_and_play(fast_config, spawner, tracks):
    catalog = StubCatalog(tracks)

    async def scenario():
        session = PlaybackSession(fast_config, spawner=spawner)
        menu = ScriptedMenu(
            session, catalog, [_option("search"), "lofi", "2", _option("exit")]
        )
        code = await menu.run()
        await tick()
        return code, session, menu

    code, session, menu = asyncio.run(scenario())
    assert code == 0
    assert catalog.queries == ["lofi"]
    assert session.playlist == tuple(tracks)
    assert session.current_index == 1
    assert spawner.calls[0][-1].endswith("v=bbb222")
    assert "Bravo" in menu.output


def test_search_cancel_keeps_previous_playlist(fast_config, spawner, tracks):
    catalog = StubCatalog(tracks[1:])

    async def scenario():
        session = PlaybackSession(fast_config, spawner=spawner)
        session.load_playlist(tracks[:1])
        menu = ScriptedMenu(session, catalog, ["query", "0"])
        started = await menu.search_and_play()
        return started, session

    started, session = asyncio.run(scenario())
    assert started is False
    assert session.playlist == (tracks[0],)
    assert spawner.calls == []


def test_search_without_results(fast_config, spawner):
    async def scenario():
        menu = ScriptedMenu(
            PlaybackSession(fast_config, spawner=spawner), StubCatalog([]), ["nothing"]
        )
        return await menu.search_and_play(), menu

    started, menu = asyncio.run(scenario())
    assert started is False
    assert "No results found" in menu.output


def test_show_playlist_marks_current_track(fast_config, spawner, tracks):
    session = PlaybackSession(fast_config, spawner=spawner)
    menu = ScriptedMenu(session, None, [])

    menu.show_playlist()
    assert "Playlist is empty" in menu.output

    session.load_playlist(tracks, 2)
    menu.show_playlist()
    assert "▶" in menu.output
    assert "Charlie - Artist C" in menu.output
    assert "(2:45)" in menu.output


def test_now_playing_reflects_session_state(fast_config, spawner, tracks):
    async def scenario():
        session = PlaybackSession(fast_config, spawner=spawner)
        menu = ScriptedMenu(session, None, [])
        menu.now_playing()
        session.load_playlist(tracks)
        session.play(0)
        await tick()
        menu.now_playing()
        session.stop()
        return menu

    menu = asyncio.run(scenario())
    output = menu.output
    assert "No track is currently playing" in output
    assert "Now Playing" in output
    assert "Alpha" in output


def test_navigation_errors_are_shown_not_raised(fast_config, spawner, tracks):
    async def scenario():
        session = PlaybackSession(fast_config, spawner=spawner)
        menu = ScriptedMenu(session, None, [])
        await menu.handle("next")
        session.load_playlist(tracks[:1])
        await menu.handle("next")
        return menu

    output = asyncio.run(scenario()).output
    assert "Playlist is empty" in output
    assert "Only one track in playlist" in output
    assert spawner.calls == []


def test_next_prev_and_stop_drive_the_session(fast_config, spawner, tracks):
    async def scenario():
        session = PlaybackSession(fast_config, spawner=spawner)
        session.load_playlist(tracks)
        menu = ScriptedMenu(session, None, [])
        await menu.handle("next")
        await settle(fast_config)
        after_next = session.current_index
        await menu.handle("prev")
        await settle(fast_config)
        after_prev = session.current_index
        await menu.handle("stop")
        return after_next, after_prev, session, menu

    after_next, after_prev, session, menu = asyncio.run(scenario())
    assert (after_next, after_prev) == (1, 0)
    assert session.state is PlaybackState.IDLE
    assert "Playback stopped" in menu.output


def test_ask_in_thread_delivers_result_and_errors():
    def closed_input():
        raise EOFError

    async def scenario():
        answer = await ask_in_thread(lambda prefix: f"{prefix}-answer", "typed")
        try:
            await ask_in_thread(closed_input)
        except EOFError:
            return answer, True
        return answer, False

    assert asyncio.run(scenario()) == ("typed-answer", True)
