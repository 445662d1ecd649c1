import asyncio

import pytest

from tmusic_cli.models.config import PlayerConfig
from tmusic_cli.models.track import Track


class FakeProcess:
    """Stands in for an asyncio subprocess running mpv."""

    def __init__(self, pid: int, exit_on_terminate: bool = True):
        self.pid = pid
        self.returncode = None
        self.signals: list[str] = []
        self.exit_on_terminate = exit_on_terminate
        self.fail_terminate = False
        self._exited = asyncio.Event()

    def finish(self, code: int) -> None:
        if self.returncode is None:
            self.returncode = code
            self._exited.set()

    def terminate(self) -> None:
        if self.fail_terminate:
            raise ProcessLookupError("no such process")
        self.signals.append("SIGTERM")
        if self.exit_on_terminate:
            self.finish(-15)

    def kill(self) -> None:
        self.signals.append("SIGKILL")
        self.finish(-9)

    async def wait(self) -> int:
        await self._exited.wait()
        return self.returncode


class FakeSpawner:
    """Records spawn requests and hands out FakeProcess objects."""

    def __init__(self):
        self.calls: list[list[str]] = []
        self.processes: list[FakeProcess] = []
        self.error: Exception | None = None
        self.exit_on_terminate = True
        self.gate: asyncio.Event | None = None

    async def __call__(self, args: list[str]) -> FakeProcess:
        self.calls.append(args)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        process = FakeProcess(
            pid=1000 + len(self.processes), exit_on_terminate=self.exit_on_terminate
        )
        self.processes.append(process)
        return process


async def tick(times: int = 5) -> None:
    """Lets scheduled tasks and callbacks run."""
    for _ in range(times):
        await asyncio.sleep(0)


async def settle(config: PlayerConfig) -> None:
    """Waits until a started transition has released its guard."""
    await asyncio.sleep(config.settle_delay + 0.02)


@pytest.fixture
def fast_config():
    return PlayerConfig(
        settle_delay=0.05,
        advance_delay=0.02,
        spawn_retry_delay=0.03,
        kill_grace_period=0.05,
        shutdown_delay=0.01,
    )


@pytest.fixture
def spawner():
    return FakeSpawner()


@pytest.fixture
def tracks():
    return [
        Track(id="aaa111", title="Alpha", artist="Artist A", duration="3:01"),
        Track(id="bbb222", title="Bravo", artist="Artist B", duration="4:12"),
        Track(id="ccc333", title="Charlie", artist="Artist C", duration="2:45"),
    ]
