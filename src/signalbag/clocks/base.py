"""Base clock interface driving deferred signal delivery."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import TYPE_CHECKING, Any

import anyio

from signalbag.exceptions import InvalidArgumentError


if TYPE_CHECKING:
    from collections.abc import Callable


logger = logging.getLogger(__name__)


class TickHandle:
    """Registration of a callback that runs once per clock tick."""

    __slots__ = ("_callback", "_cancelled", "_clock")

    def __init__(self, clock: Clock, callback: Callable[[], Any]) -> None:
        self._clock = clock
        self._callback = callback
        self._cancelled = False

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "active"
        return f"<TickHandle {self._callback!r} ({state})>"

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Stop receiving ticks. Calling this more than once is a no-op."""
        if self._cancelled:
            return
        self._cancelled = True
        self._clock._unregister(self)


class Clock(ABC):
    """Source of scheduling rounds.

    A clock hands out two services: a recurring per-tick notification
    (`every_tick`) and a way to run a callback as its own unit of work
    (`spawn`), so a failing callback never takes its siblings down with it.
    """

    def __init__(self) -> None:
        self._handles: list[TickHandle] = []
        self.ticks = 0

    def every_tick(self, callback: Callable[[], Any]) -> TickHandle:
        """Invoke callback once per tick until the returned handle is cancelled."""
        if not callable(callback):
            msg = f"Tick callback must be callable, got {type(callback).__name__}"
            raise InvalidArgumentError(msg)
        handle = TickHandle(self, callback)
        self._handles.append(handle)
        self._on_registered()
        return handle

    def tick(self) -> None:
        """Run one scheduling round.

        Callbacks registered while the round is running start with the next round.
        """
        self.ticks += 1
        for handle in list(self._handles):
            if handle.cancelled:
                continue
            try:
                handle._callback()
            except Exception:
                logger.exception("Tick callback %r failed", handle._callback)

    @property
    def active(self) -> int:
        """Number of live tick registrations."""
        return len(self._handles)

    @abstractmethod
    def spawn(self, callback: Callable[..., Any], *args: Any) -> None:
        """Run callback(*args) as an independent unit of work.

        Exceptions raised by the callback are logged, never propagated to the caller.
        """

    def _unregister(self, handle: TickHandle) -> None:
        try:
            self._handles.remove(handle)
        except ValueError:
            return
        if not self._handles:
            self._on_idle()

    def _on_registered(self) -> None:  # noqa: B027
        """Hook called after a tick registration was added."""

    def _on_idle(self) -> None:  # noqa: B027
        """Hook called when the last tick registration went away."""


class AsyncClock(Clock):
    """Clock ticking on its own inside an event loop."""

    def __init__(self, interval: float = 1 / 60) -> None:
        if interval <= 0:
            msg = f"Tick interval must be positive, got {interval}"
            raise InvalidArgumentError(msg)
        super().__init__()
        self.interval = interval

    async def wait_ticks(self, count: int = 1) -> None:
        """Wait until `count` more ticks have run and their spawned work got a turn."""
        if count < 1:
            return
        remaining = count
        done = anyio.Event()

        def countdown() -> None:
            nonlocal remaining
            remaining -= 1
            if remaining <= 0:
                handle.cancel()
                done.set()

        handle = self.every_tick(countdown)
        await done.wait()
        await anyio.sleep(0)
