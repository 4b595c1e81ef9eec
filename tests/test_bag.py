"""Tests for the disposal container."""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
from unittest.mock import Mock

import pytest

from signalbag import (
    Bag,
    CallNamedMethod,
    InvalidArgumentError,
    InvalidAttachTargetError,
    Lifetime,
    ManualClock,
    NoDisposeMethodError,
    Signal,
    UseAfterDestroyError,
)


class Widget:
    """Resource with a lowercase destroy method."""

    def __init__(self) -> None:
        self.destroy_calls = 0

    def destroy(self) -> None:
        self.destroy_calls += 1


class BothCasesConnection:
    """Resource exposing both disconnect spellings."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def disconnect(self) -> None:
        self.calls.append("disconnect")

    def Disconnect(self) -> None:  # noqa: N802
        self.calls.append("Disconnect")


class PascalInstance:
    """Resource with only PascalCase methods."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def Destroy(self) -> None:  # noqa: N802
        self.calls.append("Destroy")

    def Disconnect(self) -> None:  # noqa: N802
        self.calls.append("Disconnect")


class AlwaysEqual(Widget):
    def __eq__(self, other: object) -> bool:
        return True

    __hash__ = Widget.__hash__


async def sleeper() -> None:
    await asyncio.sleep(10)


def test_destroying_bag_disconnects_subscription(clock: ManualClock, signal: Signal):
    """Test that a subscription held by a bag is disconnected with it."""
    callback = Mock()
    subscription = signal.subscribe(callback)
    bag = Bag()
    bag.add(subscription)

    bag.destroy()

    assert not subscription.connected
    signal.fire()
    clock.advance(2)
    callback.assert_not_called()


def test_add_returns_resource(bag: Bag):
    widget = Widget()
    assert bag.add(widget) is widget
    assert widget in bag
    assert len(bag) == 1


def test_dispose_all_disposes_once(bag: Bag):
    callback = Mock()
    bag.add(callback)

    bag.dispose_all()
    bag.dispose_all()

    callback.assert_called_once_with()
    assert len(bag) == 0


def test_remove_disposes_single_resource(bag: Bag):
    first = bag.add(Widget())
    second = bag.add(Widget())

    assert bag.remove(first) is True
    assert first.destroy_calls == 1
    assert second.destroy_calls == 0
    assert bag.remove(first) is False
    assert first.destroy_calls == 1
    assert second in bag


def test_remove_matches_identity_not_equality(bag: Bag):
    first = bag.add(AlwaysEqual())
    second = bag.add(AlwaysEqual())

    assert bag.remove(second)
    assert second.destroy_calls == 1
    assert first.destroy_calls == 0
    assert bag.remove(AlwaysEqual()) is False


def test_lowercase_method_wins(bag: Bag):
    connection = bag.add(BothCasesConnection())
    bag.dispose_all()
    assert connection.calls == ["disconnect"]


def test_destroy_preferred_over_disconnect(bag: Bag):
    instance = bag.add(PascalInstance())
    bag.dispose_all()
    assert instance.calls == ["Destroy"]


def test_methods_resolved_through_getattr(bag: Bag):
    class Proxy:
        def __init__(self, target: object) -> None:
            self._target = target

        def __getattr__(self, name: str) -> object:
            return getattr(self._target, name)

    widget = Widget()
    bag.add(Proxy(widget))
    bag.dispose_all()

    assert widget.destroy_calls == 1


def test_unknown_resource_is_rejected(bag: Bag):
    with pytest.raises(NoDisposeMethodError):
        bag.add(object())
    with pytest.raises(TypeError):
        bag.add(42)
    assert len(bag) == 0


def test_callable_takes_priority():
    class CallableWidget(Widget):
        def __init__(self) -> None:
            super().__init__()
            self.called = False

        def __call__(self) -> None:
            self.called = True

    with Bag() as bag:
        resource = bag.add(CallableWidget())

    assert resource.called
    assert resource.destroy_calls == 0


def test_dispose_method_override(bag: Bag):
    lifetime = bag.add(Lifetime(), "teardown")
    widget = bag.add(Widget(), CallNamedMethod("destroy"))

    bag.dispose_all()

    assert not lifetime.alive
    assert widget.destroy_calls == 1


def test_invalid_override_is_rejected(bag: Bag):
    with pytest.raises(InvalidArgumentError):
        bag.add(Widget(), "missing")
    with pytest.raises(InvalidArgumentError):
        bag.add(Widget(), 3)  # type: ignore[arg-type]


async def test_pending_task_is_cancelled(bag: Bag):
    task = asyncio.create_task(sleeper())
    bag.add(task)

    bag.dispose_all()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert task.cancelled()


async def test_finished_task_is_ignored(bag: Bag):
    task = asyncio.create_task(asyncio.sleep(0))
    await task
    bag.add(task)

    bag.dispose_all()

    assert not task.cancelled()


def test_coroutine_is_closed(bag: Bag):
    coro = bag.add(sleeper())
    bag.dispose_all()
    assert inspect.getcoroutinestate(coro) == inspect.CORO_CLOSED


def test_finished_future_is_ignored(bag: Bag):
    future: concurrent.futures.Future[int] = concurrent.futures.Future()
    future.set_result(1)
    bag.add(future)

    bag.dispose_all()

    assert future.result() == 1


def test_tick_handle_is_cancelled(bag: Bag, clock: ManualClock):
    callback = Mock()
    handle = bag.add(clock.every_tick(callback))

    bag.destroy()
    clock.advance()

    assert handle.cancelled
    callback.assert_not_called()


def test_failing_dispose_propagates_without_retry(bag: Bag):
    survivor = Mock()
    failing = Mock(side_effect=RuntimeError("dispose failed"))
    bag.add(survivor)
    bag.add(failing)

    with pytest.raises(RuntimeError, match="dispose failed"):
        bag.dispose_all()
    assert len(bag) == 1

    bag.dispose_all()
    failing.assert_called_once_with()
    survivor.assert_called_once_with()


def test_failing_remove_propagates(bag: Bag):
    failing = bag.add(Mock(side_effect=ValueError("nope")))
    with pytest.raises(ValueError, match="nope"):
        bag.remove(failing)
    assert failing not in bag


def test_failing_destroy_leaves_bag_usable(bag: Bag):
    bag.add(Mock(side_effect=ValueError("nope")))
    with pytest.raises(ValueError, match="nope"):
        bag.destroy()

    assert not bag.destroyed
    bag.destroy()
    assert bag.destroyed


def test_use_after_destroy(bag: Bag):
    bag.destroy()
    bag.destroy()

    with pytest.raises(UseAfterDestroyError):
        bag.add(Mock())
    with pytest.raises(UseAfterDestroyError):
        bag.remove(Mock())
    with pytest.raises(UseAfterDestroyError):
        bag.dispose_all()
    with pytest.raises(UseAfterDestroyError):
        bag.attach(Lifetime())


def test_dispose_action_adding_to_bag(bag: Bag):
    late = Mock()
    bag.add(lambda: bag.add(late))

    bag.dispose_all()

    late.assert_called_once_with()
    assert len(bag) == 0


def test_dispose_action_removing_sibling(bag: Bag):
    sibling = bag.add(Widget())
    bag.add(lambda: bag.remove(sibling))

    bag.dispose_all()

    assert sibling.destroy_calls == 1


def test_dispose_action_destroying_bag(bag: Bag):
    widget = bag.add(Widget())
    bag.add(bag.destroy)

    bag.dispose_all()

    assert bag.destroyed
    assert widget.destroy_calls == 1


def test_nested_bags():
    outer = Bag("outer")
    inner = outer.add(Bag("inner"))
    widget = inner.add(Widget())

    outer.destroy()

    assert inner.destroyed
    assert widget.destroy_calls == 1


def test_attach_destroys_with_host(bag: Bag):
    lifetime = Lifetime("node")
    callback = bag.add(Mock())
    bag.attach(lifetime)

    lifetime.teardown()

    callback.assert_called_once_with()
    assert bag.destroyed


def test_attach_replaces_previous_host(bag: Bag):
    first = Lifetime("first")
    second = Lifetime("second")
    bag.attach(first)
    bag.attach(second)

    first.teardown()
    assert not bag.destroyed

    second.teardown()
    assert bag.destroyed


def test_destroy_detaches_from_host(bag: Bag):
    lifetime = Lifetime()
    bag.attach(lifetime)
    bag.destroy()

    lifetime.teardown()
    assert bag.destroyed


def test_attach_to_parent_bag(bag: Bag):
    child = Bag("child")
    widget = child.add(Widget())
    child.attach(bag)

    bag.destroy()

    assert child.destroyed
    assert widget.destroy_calls == 1


def test_attach_rejects_invalid_hosts(bag: Bag):
    dead = Lifetime()
    dead.teardown()

    with pytest.raises(InvalidAttachTargetError):
        bag.attach(dead)
    with pytest.raises(InvalidAttachTargetError):
        bag.attach(object())  # type: ignore[arg-type]
    with pytest.raises(InvalidArgumentError):
        bag.attach(bag)


def test_on_teardown_runs_after_disposal(bag: Bag):
    order: list[str] = []
    bag.add(lambda: order.append("disposed"))
    bag.on_teardown(lambda: order.append("teardown"))

    bag.destroy()

    assert order == ["disposed", "teardown"]
