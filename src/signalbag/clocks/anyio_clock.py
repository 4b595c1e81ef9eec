"""Clock running inside an anyio task group."""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any

import anyio

from signalbag.clocks.base import AsyncClock


if TYPE_CHECKING:
    from collections.abc import Callable

    from anyio.abc import TaskGroup


logger = logging.getLogger(__name__)


class AnyioClock(AsyncClock):
    """Structured clock for any anyio backend.

    Ticks and spawned callbacks only run while the clock is entered:

        async with AnyioClock() as clock:
            signal = Signal[str](clock)
            ...

    Leaving the block cancels the ticker and any spawned work still running.
    """

    def __init__(self, interval: float = 1 / 60) -> None:
        super().__init__(interval)
        self._task_group: TaskGroup | None = None
        self._wakeup: anyio.Event | None = None

    @property
    def running(self) -> bool:
        return self._task_group is not None

    async def __aenter__(self) -> AnyioClock:
        task_group = anyio.create_task_group()
        await task_group.__aenter__()
        self._task_group = task_group
        task_group.start_soon(self._run)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool | None:
        task_group = self._task_group
        if task_group is None:
            msg = "AnyioClock was exited without being entered"
            raise RuntimeError(msg)
        self._task_group = None
        self._wakeup = None
        task_group.cancel_scope.cancel()
        return await task_group.__aexit__(exc_type, exc_val, exc_tb)

    def spawn(self, callback: Callable[..., Any], *args: Any) -> None:
        if self._task_group is None:
            msg = "AnyioClock is not running, use it as 'async with AnyioClock() as clock'"
            raise RuntimeError(msg)
        self._task_group.start_soon(self._invoke, callback, args)

    async def _invoke(self, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Error in callback %r", callback)

    def _on_registered(self) -> None:
        if self._wakeup is not None:
            self._wakeup.set()

    async def _run(self) -> None:
        while True:
            if not self._handles:
                self._wakeup = anyio.Event()
                await self._wakeup.wait()
                self._wakeup = None
            await anyio.sleep(self.interval)
            self.tick()
