"""Shared fixtures."""

from __future__ import annotations

import pytest

from signalbag import Bag, ManualClock, Signal


@pytest.fixture
def clock() -> ManualClock:
    """Create a manually advanced clock."""
    return ManualClock()


@pytest.fixture
def signal(clock: ManualClock) -> Signal:
    """Create a signal driven by the manual clock."""
    return Signal(clock, name="test")


@pytest.fixture
def bag() -> Bag:
    """Create an empty bag."""
    return Bag("test")
