"""Clock advanced explicitly by its owner."""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any

from signalbag.clocks.base import Clock


if TYPE_CHECKING:
    from collections.abc import Callable


logger = logging.getLogger(__name__)


class ManualClock(Clock):
    """Deterministic clock for host-driven loops and tests.

    Nothing happens until `advance` is called. Spawned work runs right away,
    inside the round that spawned it.

    Example:
        clock = ManualClock()
        signal = Signal[int](clock)
        signal.subscribe(print)
        signal.fire(42)
        clock.advance()  # prints 42
    """

    def advance(self, rounds: int = 1) -> None:
        """Run the given number of ticks."""
        for _ in range(rounds):
            self.tick()

    def spawn(self, callback: Callable[..., Any], *args: Any) -> None:
        try:
            result = callback(*args)
        except Exception:
            logger.exception("Error in callback %r", callback)
            return
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            logger.error(
                "ManualClock cannot await the result of %r, use an async clock instead",
                callback,
            )
