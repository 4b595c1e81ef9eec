"""Clocks providing the scheduling rounds signals deliver on."""

from signalbag.clocks.base import AsyncClock, Clock, TickHandle
from signalbag.clocks.manual import ManualClock
from signalbag.clocks.asyncio_clock import AsyncioClock
from signalbag.clocks.anyio_clock import AnyioClock
from signalbag.clocks.configs import (
    AnyioClockConfig,
    AsyncioClockConfig,
    ClockConfig,
    ManualClockConfig,
    load_clock_config,
)

__all__ = [
    "AnyioClock",
    "AnyioClockConfig",
    "AsyncClock",
    "AsyncioClock",
    "AsyncioClockConfig",
    "Clock",
    "ClockConfig",
    "ManualClock",
    "ManualClockConfig",
    "TickHandle",
    "load_clock_config",
]
