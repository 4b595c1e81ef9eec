"""Clock configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


if TYPE_CHECKING:
    from signalbag.clocks.anyio_clock import AnyioClock
    from signalbag.clocks.asyncio_clock import AsyncioClock
    from signalbag.clocks.manual import ManualClock


DEFAULT_INTERVAL = 1 / 60


class BaseClockConfig(BaseModel):
    """Base clock configuration."""

    type: str = Field(init=False)
    """Clock type."""

    model_config = ConfigDict(use_attribute_docstrings=True, extra="forbid")


class ManualClockConfig(BaseClockConfig):
    """Manually advanced clock.

    Ticks only happen when the owner calls `advance`. Meant for host loops
    that already have a frame callback, and for tests.
    """

    type: Literal["manual"] = Field("manual", init=False)

    def get_clock(self) -> ManualClock:
        """Create manual clock instance."""
        from signalbag.clocks.manual import ManualClock

        return ManualClock()


class AsyncioClockConfig(BaseClockConfig):
    """Clock ticking on the running asyncio event loop."""

    type: Literal["asyncio"] = Field("asyncio", init=False)

    interval: float = Field(
        default=DEFAULT_INTERVAL,
        gt=0.0,
        title="Tick Interval",
        examples=[1 / 60, 0.1],
    )
    """Seconds between two ticks."""

    def get_clock(self) -> AsyncioClock:
        """Create asyncio clock instance."""
        from signalbag.clocks.asyncio_clock import AsyncioClock

        return AsyncioClock(interval=self.interval)


class AnyioClockConfig(BaseClockConfig):
    """Clock running inside an anyio task group."""

    type: Literal["anyio"] = Field("anyio", init=False)

    interval: float = Field(
        default=DEFAULT_INTERVAL,
        gt=0.0,
        title="Tick Interval",
        examples=[1 / 60, 0.1],
    )
    """Seconds between two ticks."""

    def get_clock(self) -> AnyioClock:
        """Create anyio clock instance (enter it with `async with`)."""
        from signalbag.clocks.anyio_clock import AnyioClock

        return AnyioClock(interval=self.interval)


# Union type for all clock configurations
ClockConfig = Annotated[
    ManualClockConfig | AsyncioClockConfig | AnyioClockConfig,
    Field(discriminator="type"),
]

_adapter: TypeAdapter[ClockConfig] = TypeAdapter(ClockConfig)


def load_clock_config(data: dict) -> ClockConfig:
    """Validate a mapping (e.g. parsed from a settings file) into a clock config."""
    return _adapter.validate_python(data)
