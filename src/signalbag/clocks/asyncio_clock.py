"""Clock ticking from an asyncio task."""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from typing import TYPE_CHECKING, Any

from signalbag.clocks.base import AsyncClock


if TYPE_CHECKING:
    from collections.abc import Callable


logger = logging.getLogger(__name__)


class AsyncioClock(AsyncClock):
    """Ticks every `interval` seconds on the running asyncio loop.

    The ticker task only exists while something is registered for ticks,
    so an idle clock costs nothing.
    """

    def __init__(self, interval: float = 1 / 60) -> None:
        """Initialize the clock.

        Args:
            interval: Seconds between two ticks
        """
        super().__init__(interval)
        self._ticker: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Future[Any]] = set()

    def spawn(self, callback: Callable[..., Any], *args: Any) -> None:
        asyncio.get_running_loop().call_soon(self._invoke, callback, args)

    async def aclose(self) -> None:
        """Stop ticking and cancel spawned work that is still running."""
        pending = list(self._tasks)
        if self._ticker is not None:
            pending.append(self._ticker)
            self._ticker = None
        for task in pending:
            task.cancel()
        for task in pending:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._tasks.clear()

    async def __aenter__(self) -> AsyncioClock:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def _invoke(self, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        try:
            result = callback(*args)
        except Exception:
            logger.exception("Error in callback %r", callback)
            return
        if inspect.isawaitable(result):
            future = asyncio.ensure_future(result)
            self._tasks.add(future)
            future.add_done_callback(self._task_done)

    def _task_done(self, future: asyncio.Future[Any]) -> None:
        self._tasks.discard(future)
        if future.cancelled():
            return
        if (exc := future.exception()) is not None:
            logger.error("Error in async callback", exc_info=exc)

    def _on_registered(self) -> None:
        if self._ticker is None or self._ticker.done():
            self._ticker = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while self._handles:
            await asyncio.sleep(self.interval)
            self.tick()
        self._ticker = None
