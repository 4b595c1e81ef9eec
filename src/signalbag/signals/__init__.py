"""Deferred signals.

Example:
    clock = ManualClock()

    class Counter:
        incremented = SignalField[int]()

        def __init__(self) -> None:
            self.clock = clock

    counter = Counter()
    subscription = counter.incremented.subscribe(print)
    counter.incremented.fire(1)
    clock.advance()  # prints 1
"""

from __future__ import annotations

from signalbag.signals.core import Callback, Signal, SignalField, Subscription

__all__ = [
    "Callback",
    "Signal",
    "SignalField",
    "Subscription",
]
