"""Deferred multi-subscriber signals."""

from __future__ import annotations

from collections import deque
import logging
from typing import TYPE_CHECKING, Any, TypeVarTuple, Unpack, overload
import weakref
from weakref import WeakKeyDictionary

from signalbag.clocks.base import Clock
from signalbag.exceptions import InvalidArgumentError, UseAfterDestroyError


if TYPE_CHECKING:
    from collections.abc import Callable

    from signalbag.clocks.base import TickHandle


logger = logging.getLogger(__name__)

Ts = TypeVarTuple("Ts")

type Callback[*Ts] = Callable[[Unpack[Ts]], Any]


class Subscription[*Ts]:
    """Live registration of one callback on one signal.

    Obtained from `Signal.subscribe`, never constructed directly. Only holds a
    weak reference to its signal, so it never keeps the signal alive.
    Once disconnected it stays disconnected.
    """

    __slots__ = ("_callback", "_connected", "_signal", "_since")

    def __init__(self, signal: Signal[*Ts], callback: Callback[*Ts], since: int) -> None:
        self._signal: weakref.ref[Signal[*Ts]] | None = weakref.ref(signal)
        self._callback = callback
        self._connected = True
        # Payloads fired up to this index predate the subscription.
        self._since = since

    def __repr__(self) -> str:
        state = "connected" if self._connected else "disconnected"
        return f"<Subscription {self._callback!r} ({state})>"

    @property
    def connected(self) -> bool:
        """Whether the callback still receives payloads."""
        return self._connected

    @property
    def callback(self) -> Callback[*Ts]:
        return self._callback

    def disconnect(self) -> None:
        """Stop receiving payloads. Calling this more than once is a no-op."""
        if not self._connected:
            return
        signal = self._signal() if self._signal is not None else None
        if signal is not None and not signal.destroyed:
            signal.unsubscribe(self)
        self._invalidate()

    def _invalidate(self) -> None:
        self._connected = False
        self._signal = None


class Signal[*Ts]:
    """Asynchronous FIFO event channel.

    Payloads passed to `fire` are queued and delivered on a later tick of the
    clock, one payload per tick, in fire order. Each subscriber callback runs
    as its own unit of work, so a failing callback does not affect the others.

    A payload goes to the subscriptions that existed when it was fired and are
    still connected when it is delivered.

    Example:
        clock = ManualClock()
        changed = Signal[str](clock)
        subscription = changed.subscribe(print)
        changed.fire("hello")
        clock.advance()  # prints "hello"
        subscription.disconnect()
        changed.destroy()
    """

    __slots__ = (
        "__weakref__",
        "_clock",
        "_destroyed",
        "_dispatch",
        "_fired",
        "_pending",
        "_subscriptions",
        "name",
    )

    def __init__(self, clock: Clock, name: str = "") -> None:
        if not isinstance(clock, Clock):
            msg = f"clock must be a Clock, got {type(clock).__name__}"
            raise InvalidArgumentError(msg)
        self.name = name
        self._clock = clock
        self._subscriptions: dict[Subscription[*Ts], None] = {}
        self._pending: deque[tuple[int, tuple[Any, ...]]] = deque()
        self._fired = 0
        self._dispatch: TickHandle | None = None
        self._destroyed = False

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        state = " (destroyed)" if self._destroyed else ""
        return f"<Signal{label} subscribers={len(self._subscriptions)}{state}>"

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def pending(self) -> int:
        """Number of payloads waiting for delivery."""
        return len(self._pending)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    @property
    def clock(self) -> Clock:
        return self._clock

    def subscribe(self, callback: Callback[*Ts]) -> Subscription[*Ts]:
        """Register callback and return its subscription.

        Callback may be a plain function or a coroutine function. The first
        subscription starts the dispatch loop on the clock, removing the last
        one stops it again.
        """
        self._check_alive("subscribe")
        if not callable(callback):
            msg = f"callback must be callable, got {type(callback).__name__}"
            raise InvalidArgumentError(msg)
        subscription = Subscription(self, callback, self._fired)
        self._subscriptions[subscription] = None
        if self._dispatch is None:
            self._dispatch = self._clock.every_tick(self._drain)
        return subscription

    def unsubscribe(self, subscription: Subscription[*Ts]) -> None:
        """Remove a subscription. Unknown or already removed subscriptions are ignored."""
        self._check_alive("unsubscribe")
        if not isinstance(subscription, Subscription):
            msg = f"subscription must be a Subscription, got {type(subscription).__name__}"
            raise InvalidArgumentError(msg)
        if subscription in self._subscriptions:
            del self._subscriptions[subscription]
            subscription._invalidate()
            if not self._subscriptions:
                self._stop_dispatch()

    def fire(self, *args: *Ts) -> None:
        """Queue args for delivery. Returns immediately.

        Without subscribers the payload is dropped.
        """
        self._check_alive("fire")
        if not self._subscriptions:
            logger.debug("%r: no subscribers, dropping payload", self)
            return
        self._fired += 1
        self._pending.append((self._fired, args))

    def destroy(self) -> None:
        """Discard pending payloads and disconnect every subscription.

        Calling this more than once is a no-op.
        """
        if self._destroyed:
            return
        self._destroyed = True
        dropped = len(self._pending)
        self._stop_dispatch()
        subscriptions = list(self._subscriptions)
        self._subscriptions.clear()
        for subscription in subscriptions:
            subscription._invalidate()
        logger.debug(
            "%r destroyed, discarded %d pending payload(s) and %d subscription(s)",
            self,
            dropped,
            len(subscriptions),
        )

    def _drain(self) -> None:
        if not self._pending:
            return
        index, args = self._pending.popleft()
        recipients = [sub for sub in self._subscriptions if sub._since < index]
        for subscription in recipients:
            self._clock.spawn(subscription._callback, *args)

    def _stop_dispatch(self) -> None:
        # Queued payloads need a recipient connected at drain time, so none is left.
        self._pending.clear()
        if self._dispatch is not None:
            self._dispatch.cancel()
            self._dispatch = None

    def _check_alive(self, operation: str) -> None:
        if self._destroyed:
            raise UseAfterDestroyError(self, operation)


class SignalField[*Ts]:
    """Descriptor: define at class level, get one Signal per instance.

    The per-instance signal is built on the clock found on the instance
    (attribute `clock` unless told otherwise).

    Example:
        class Door:
            opened = SignalField[str]()

            def __init__(self, clock: Clock) -> None:
                self.clock = clock
    """

    __slots__ = ("_clock_attr", "_name", "_signals")

    def __init__(self, clock_attr: str = "clock") -> None:
        self._name: str = ""
        self._clock_attr = clock_attr
        self._signals: WeakKeyDictionary[object, Signal[*Ts]] = WeakKeyDictionary()

    def __set_name__(self, owner: type, name: str) -> None:
        self._name = name

    @overload
    def __get__(self, obj: None, owner: type | None = None) -> SignalField[*Ts]: ...

    @overload
    def __get__(self, obj: object, owner: type | None = None) -> Signal[*Ts]: ...

    def __get__(
        self, obj: object | None, owner: type | None = None
    ) -> Signal[*Ts] | SignalField[*Ts]:
        if obj is None:
            return self
        if obj not in self._signals:
            clock = getattr(obj, self._clock_attr, None)
            if not isinstance(clock, Clock):
                msg = (
                    f"{type(obj).__name__}.{self._clock_attr} must be a Clock "
                    f"to use signal {self._name!r}"
                )
                raise InvalidArgumentError(msg)
            name = f"{type(obj).__name__}.{self._name}"
            self._signals[obj] = Signal(clock, name=name)
        return self._signals[obj]
