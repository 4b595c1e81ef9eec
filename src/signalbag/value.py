"""Observable single-value cell."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic

from typing_extensions import TypeVar

from signalbag.exceptions import InvalidArgumentError, UseAfterDestroyError
from signalbag.signals.core import Signal


if TYPE_CHECKING:
    from collections.abc import Callable

    from signalbag.clocks.base import Clock
    from signalbag.signals.core import Subscription


T = TypeVar("T", default=Any)


class Value(Generic[T]):
    """A value that can be observed by multiple observers.

    Example:
        health = Value[int](clock, 100)
        subscription = health.observe(lambda hp: print("hp:", hp))  # prints "hp: 100"
        health.set(80)
        clock.advance()  # prints "hp: 80"
    """

    def __init__(self, clock: Clock, value: T | None = None) -> None:
        self._changed: Signal[T | None] = Signal(clock, name="Value.changed")
        self._value = value
        self._destroyed = False

    def __repr__(self) -> str:
        return f"Value({self._value!r})"

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def get(self) -> T | None:
        """Return the current value."""
        self._check_alive("get")
        return self._value

    def set(self, value: T | None) -> None:
        """Store value and notify observers on the next tick."""
        self._check_alive("set")
        self._value = value
        self._changed.fire(value)

    def observe(self, callback: Callable[[T | None], Any]) -> Subscription[T | None]:
        """Invoke callback with the current value now and after every change."""
        self._check_alive("observe")
        if not callable(callback):
            msg = f"callback must be callable, got {type(callback).__name__}"
            raise InvalidArgumentError(msg)
        subscription = self._changed.subscribe(callback)
        callback(self._value)
        return subscription

    def destroy(self) -> None:
        """Disconnect all observers. Calling this more than once is a no-op."""
        if self._destroyed:
            return
        self._destroyed = True
        self._changed.destroy()
        self._value = None

    def _check_alive(self, operation: str) -> None:
        if self._destroyed:
            raise UseAfterDestroyError(self, operation)
