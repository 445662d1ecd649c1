"""
Guarantees the player process is released before the program exits, whether
the exit comes from the menu, a termination signal, or an unexpected fault.
"""

import asyncio
import atexit
import logging
import signal
from collections.abc import Coroutine
from typing import Any

from rich.markup import escape

from .session import PlaybackSession

log = logging.getLogger(__name__)


class ShutdownCoordinator:
    """
    Routes every termination path through the session's idempotent cleanup.

    - SIGINT/SIGTERM/SIGHUP/SIGQUIT: cleanup, then exit 0 after a short delay.
    - Unhandled errors in loop callbacks or tasks: cleanup, exit 1.
    - An exception escaping the menu coroutine: cleanup, exit 1.
    - Interpreter exit: cleanup once more via atexit.
    """

    SIGNAL_NAMES = ("SIGINT", "SIGTERM", "SIGHUP", "SIGQUIT")

    def __init__(self, session: PlaybackSession, exit_delay: float | None = None):
        self.session = session
        self.exit_delay = (
            session.config.shutdown_delay if exit_delay is None else exit_delay
        )
        self.exit_code: int | None = None

        self._loop: asyncio.AbstractEventLoop | None = None
        self._finished: asyncio.Event | None = None
        self._exit_timer: asyncio.TimerHandle | None = None
        self._loop_signals: list[int] = []
        self._fallback_signals: dict[int, Any] = {}
        self._previous_exception_handler = None
        self._atexit_registered = False

    @property
    def finished(self) -> bool:
        return self._finished is not None and self._finished.is_set()

    def install(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Registers signal, loop-exception and interpreter-exit hooks."""
        self._loop = loop or asyncio.get_running_loop()
        self._finished = asyncio.Event()

        for name in self.SIGNAL_NAMES:
            signum = getattr(signal, name, None)
            if signum is None:
                continue
            try:
                self._loop.add_signal_handler(signum, self._on_signal, name)
                self._loop_signals.append(signum)
            except (NotImplementedError, RuntimeError):
                # No loop signal support (Windows); hand off from a plain handler
                try:
                    self._fallback_signals[signum] = signal.signal(
                        signum, self._make_fallback_handler(name)
                    )
                except (OSError, ValueError) as e:
                    log.debug(f"Cannot install handler for {name}: {e}")

        self._previous_exception_handler = self._loop.get_exception_handler()
        self._loop.set_exception_handler(self._on_loop_exception)

        if not self._atexit_registered:
            atexit.register(self._on_interpreter_exit)
            self._atexit_registered = True

    def uninstall(self) -> None:
        """Removes every hook installed by `install`."""
        if self._loop is not None:
            for signum in self._loop_signals:
                self._loop.remove_signal_handler(signum)
            if not self._loop.is_closed():
                self._loop.set_exception_handler(self._previous_exception_handler)
        for signum, previous in self._fallback_signals.items():
            signal.signal(signum, previous)
        self._loop_signals.clear()
        self._fallback_signals.clear()

        if self._atexit_registered:
            atexit.unregister(self._on_interpreter_exit)
            self._atexit_registered = False

    def cleanup(self) -> None:
        self.session.cleanup()

    async def run(self, main: Coroutine[Any, Any, int | None]) -> int:
        """
        Runs `main` until it returns or a shutdown is triggered.

        Returns:
            The process exit code. Cleanup has always run by the time this returns.
        """
        if self._finished is None:
            raise RuntimeError("ShutdownCoordinator.install() must be called first.")

        main_task = asyncio.ensure_future(main)
        finished_task = asyncio.ensure_future(self._finished.wait())
        try:
            done, _ = await asyncio.wait(
                {main_task, finished_task}, return_when=asyncio.FIRST_COMPLETED
            )
            if main_task in done:
                code = main_task.result()
                self._finish(0 if code is None else code)
            return self.exit_code
        except Exception as e:
            log.error(f"[red]Uncaught Exception: {escape(str(e))}[/red]", exc_info=True)
            self._finish(1)
            return 1
        finally:
            for task in (main_task, finished_task):
                if not task.done():
                    task.cancel()
            self.cleanup()

    def _finish(self, code: int) -> None:
        if self.exit_code is None:
            self.exit_code = code
        if self._finished is not None:
            self._finished.set()

    def _on_signal(self, name: str) -> None:
        log.warning(f"[yellow]Received {name}, cleaning up...[/yellow]")
        self.cleanup()
        if self._exit_timer is None and self._loop is not None:
            self._exit_timer = self._loop.call_later(self.exit_delay, self._finish, 0)

    def _make_fallback_handler(self, name: str):
        def handler(signum, frame):
            self._loop.call_soon_threadsafe(self._on_signal, name)

        return handler

    def _on_loop_exception(
        self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
    ) -> None:
        message = context.get("message", "Unhandled exception in event loop")
        exception = context.get("exception")
        log.error(
            f"[red]Unhandled error: {escape(message)}[/red]",
            exc_info=exception,
        )
        self.cleanup()
        self._finish(1)

    def _on_interpreter_exit(self) -> None:
        log.debug(f"Process exiting with code: {self.exit_code}")
        self.cleanup()
