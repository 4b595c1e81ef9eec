"""Container disposing of the resources it holds."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from signalbag.bag.dispose import resolve_dispose_action
from signalbag.bag.lifetime import Lifetime, TeardownSource
from signalbag.exceptions import InvalidAttachTargetError, UseAfterDestroyError


if TYPE_CHECKING:
    from collections.abc import Callable

    from signalbag.bag.dispose import Disconnectable, DisposeAction
    from signalbag.bag.lifetime import TeardownHook


logger = logging.getLogger(__name__)


class Bag:
    """Holds resources that have to be disposed of later.

    Every resource is disposed of at most once, either on its own through
    `remove` or together with the rest through `dispose_all` / `destroy`.
    How a resource gets disposed of is decided when it is added:

    | Resource | Dispose action |
    | -------- | -------------- |
    | callable | `resource()` |
    | task, future, handle, coroutine | cancelled (skipped if already done) |
    | object | `destroy()`, `Destroy()`, `disconnect()` or `Disconnect()` |
    | any, with `dispose="name"` | `resource.name()` |

    Example:
        bag = Bag()
        bag.add(signal.subscribe(on_change))
        bag.add(lambda: print("disposed"))
        bag.destroy()  # disconnects the subscription, prints "disposed"

    Errors raised by dispose actions propagate to the caller. The entry is
    removed before its action runs, so a failing action is never retried.
    """

    __slots__ = ("__weakref__", "_attachment", "_destroyed", "_entries", "_lifetime", "name")

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._entries: list[tuple[Any, DisposeAction]] = []
        self._attachment: Disconnectable | None = None
        self._lifetime = Lifetime(name)
        self._destroyed = False

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        state = " (destroyed)" if self._destroyed else ""
        return f"<Bag{label} entries={len(self._entries)}{state}>"

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, resource: object) -> bool:
        return any(item is resource for item, _ in self._entries)

    def __enter__(self) -> Bag:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.destroy()

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def alive(self) -> bool:
        return not self._destroyed

    def add[R](self, resource: R, dispose: str | DisposeAction | None = None) -> R:
        """Add a resource and return it unchanged.

        Args:
            resource: Resource to dispose of later
            dispose: Method name or DisposeAction overriding the inferred one

        Raises:
            NoDisposeMethodError: No dispose action could be inferred
        """
        self._check_alive("add")
        action = resolve_dispose_action(resource, dispose)
        self._entries.append((resource, action))
        return resource

    def remove(self, resource: object) -> bool:
        """Dispose of a single resource.

        Returns:
            True if the resource was held by this bag, False otherwise
        """
        self._check_alive("remove")
        for index, (item, action) in enumerate(self._entries):
            if item is not resource:
                continue
            last = self._entries.pop()
            if index < len(self._entries):
                self._entries[index] = last
            action(item)
            return True
        return False

    def dispose_all(self) -> None:
        """Dispose of every resource. Disposal order is not guaranteed."""
        self._check_alive("dispose")
        self._dispose_entries()

    def destroy(self) -> None:
        """Dispose of every resource, detach and notify teardown listeners.

        Calling this more than once is a no-op. If a dispose action raises,
        the bag stays usable and the remaining resources stay in it.
        """
        if self._destroyed:
            return
        self._dispose_entries()
        self._destroyed = True
        self._detach()
        logger.debug("%r destroyed", self)
        self._lifetime.teardown()

    def attach(self, host: TeardownSource) -> None:
        """Destroy this bag automatically when host is torn down.

        Replaces any previous attachment.

        Raises:
            InvalidAttachTargetError: host is not a live teardown source
        """
        self._check_alive("attach")
        if host is self or not isinstance(host, TeardownSource):
            msg = f"Cannot attach {self!r} to {host!r}"
            raise InvalidAttachTargetError(msg)
        if not host.alive:
            msg = f"Cannot attach {self!r} to {host!r}: it has already been torn down"
            raise InvalidAttachTargetError(msg)
        self._detach()
        self._attachment = host.on_teardown(self.destroy)

    def on_teardown(self, callback: Callable[[], Any]) -> TeardownHook:
        """Register callback to run once this bag is destroyed."""
        return self._lifetime.on_teardown(callback)

    def _dispose_entries(self) -> None:
        while self._entries:
            resource, action = self._entries.pop()
            action(resource)

    def _detach(self) -> None:
        if self._attachment is not None:
            self._attachment.disconnect()
            self._attachment = None

    def _check_alive(self, operation: str) -> None:
        if self._destroyed:
            raise UseAfterDestroyError(self, operation)
