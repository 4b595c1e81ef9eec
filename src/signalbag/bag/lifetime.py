"""Teardown notification sources a bag can be attached to."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable


if TYPE_CHECKING:
    from collections.abc import Callable

    from signalbag.bag.dispose import Disconnectable


logger = logging.getLogger(__name__)


@runtime_checkable
class TeardownSource(Protocol):
    """Something that announces its own teardown exactly once."""

    @property
    def alive(self) -> bool: ...

    def on_teardown(self, callback: Callable[[], Any]) -> Disconnectable: ...


class TeardownHook:
    """Registration of one callback on a Lifetime."""

    __slots__ = ("_callback", "_lifetime")

    def __init__(self, lifetime: Lifetime, callback: Callable[[], Any]) -> None:
        self._lifetime: Lifetime | None = lifetime
        self._callback = callback

    @property
    def connected(self) -> bool:
        return self._lifetime is not None

    def disconnect(self) -> None:
        if self._lifetime is not None:
            self._lifetime._hooks.pop(self, None)
            self._lifetime = None


class Lifetime:
    """Host-side resource whose end can be observed.

    Stands in for whatever owns a group of resources in the host program
    (a scene node, a session, a connection). `teardown` notifies every
    registered callback once, in registration order.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._hooks: dict[TeardownHook, None] = {}
        self._alive = True

    def __repr__(self) -> str:
        state = "alive" if self._alive else "torn down"
        label = f" {self.name!r}" if self.name else ""
        return f"<Lifetime{label} ({state})>"

    @property
    def alive(self) -> bool:
        return self._alive

    def on_teardown(self, callback: Callable[[], Any]) -> TeardownHook:
        """Register callback to run when this lifetime ends."""
        hook = TeardownHook(self, callback)
        if self._alive:
            self._hooks[hook] = None
        else:
            hook._lifetime = None
        return hook

    def teardown(self) -> None:
        """End this lifetime. Calling this more than once is a no-op."""
        if not self._alive:
            return
        self._alive = False
        hooks = list(self._hooks)
        self._hooks.clear()
        for hook in hooks:
            hook._lifetime = None
            try:
                hook._callback()
            except Exception:
                logger.exception("Teardown callback %r of %r failed", hook._callback, self)
