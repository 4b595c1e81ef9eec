"""Dispose strategies and their inference from a resource's capabilities."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine, Generator
import concurrent.futures
import contextlib
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from signalbag.exceptions import InvalidArgumentError, NoDisposeMethodError


@runtime_checkable
class Cancellable(Protocol):
    """Scheduled unit of work: task, future, timer handle, tick handle."""

    def cancel(self) -> Any: ...


@runtime_checkable
class Destroyable(Protocol):
    def destroy(self) -> Any: ...


@runtime_checkable
class PascalDestroyable(Protocol):
    def Destroy(self) -> Any: ...  # noqa: N802


@runtime_checkable
class Disconnectable(Protocol):
    def disconnect(self) -> Any: ...


@runtime_checkable
class PascalDisconnectable(Protocol):
    def Disconnect(self) -> Any: ...  # noqa: N802


@dataclass(frozen=True, slots=True)
class InvokeCallable:
    """Dispose by calling the resource without arguments."""

    def __call__(self, resource: Any) -> None:
        resource()


@dataclass(frozen=True, slots=True)
class CancelTask:
    """Dispose by cancelling a unit of work.

    Units that already finished are left alone.
    """

    def __call__(self, resource: Any) -> None:
        if isinstance(resource, Coroutine | Generator):
            resource.close()
            return
        done = getattr(resource, "done", None)
        if callable(done) and done():
            return
        with contextlib.suppress(asyncio.InvalidStateError, concurrent.futures.InvalidStateError):
            resource.cancel()


@dataclass(frozen=True, slots=True)
class CallNamedMethod:
    """Dispose by calling the named method of the resource."""

    name: str

    def __call__(self, resource: Any) -> None:
        getattr(resource, self.name)()


type DisposeAction = InvokeCallable | CancelTask | CallNamedMethod

# Probe order for resources that are neither callable nor cancellable.
NAMED_DISPOSE_METHODS: tuple[tuple[type, str], ...] = (
    (Destroyable, "destroy"),
    (PascalDestroyable, "Destroy"),
    (Disconnectable, "disconnect"),
    (PascalDisconnectable, "Disconnect"),
)


def _provides(resource: Any, protocol: type, name: str) -> bool:
    if isinstance(resource, protocol):
        return callable(getattr(resource, name))
    # Methods served by __getattr__ are invisible to protocol checks.
    return callable(getattr(resource, name, None))


def infer_dispose_action(resource: Any) -> DisposeAction:
    """Pick the dispose strategy for a resource.

    Callables are invoked, units of work are cancelled, anything else must
    expose one of `destroy`, `Destroy`, `disconnect` or `Disconnect`
    (checked in that order).

    Raises:
        NoDisposeMethodError: None of the above applies.
    """
    if callable(resource):
        return InvokeCallable()
    if isinstance(resource, Coroutine | Generator | Cancellable):
        return CancelTask()
    for protocol, name in NAMED_DISPOSE_METHODS:
        if _provides(resource, protocol, name):
            return CallNamedMethod(name)
    raise NoDisposeMethodError(resource)


def resolve_dispose_action(
    resource: Any, override: str | DisposeAction | None = None
) -> DisposeAction:
    """Return the dispose action for resource, honouring an explicit override."""
    match override:
        case None:
            return infer_dispose_action(resource)
        case InvokeCallable() | CancelTask() | CallNamedMethod():
            return override
        case str():
            if not callable(getattr(resource, override, None)):
                msg = f"{type(resource).__name__} has no callable method {override!r}"
                raise InvalidArgumentError(msg)
            return CallNamedMethod(override)
        case _:
            msg = (
                "dispose must be a method name or a DisposeAction, "
                f"got {type(override).__name__}"
            )
            raise InvalidArgumentError(msg)
