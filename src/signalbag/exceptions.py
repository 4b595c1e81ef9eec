"""Exception hierarchy for signals, bags and clocks."""

from __future__ import annotations


class SignalBagError(Exception):
    """Base class for all signalbag errors."""


class InvalidArgumentError(SignalBagError, TypeError):
    """A call received an argument of the wrong type or shape."""


class InvalidAttachTargetError(InvalidArgumentError):
    """A bag was attached to something that is not a live teardown source."""


class UseAfterDestroyError(SignalBagError, RuntimeError):
    """An operation was attempted on a destroyed object."""

    def __init__(self, obj: object, operation: str) -> None:
        self.obj = obj
        self.operation = operation
        super().__init__(f"Cannot {operation}: {type(obj).__name__} has been destroyed")


class NoDisposeMethodError(SignalBagError, TypeError):
    """No dispose strategy could be inferred for a resource."""

    def __init__(self, resource: object) -> None:
        self.resource = resource
        super().__init__(
            f"Failed to get dispose method for object of type "
            f"{type(resource).__name__!r}: {resource!r}"
        )
