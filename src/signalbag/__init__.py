"""signalbag: deferred signals and disposal containers."""

__version__ = "0.1.0"

from signalbag.bag import (
    Bag,
    CallNamedMethod,
    CancelTask,
    DisposeAction,
    InvokeCallable,
    Lifetime,
    TeardownSource,
    infer_dispose_action,
)
from signalbag.clocks import (
    AnyioClock,
    AsyncioClock,
    Clock,
    ClockConfig,
    ManualClock,
    TickHandle,
    load_clock_config,
)
from signalbag.exceptions import (
    InvalidArgumentError,
    InvalidAttachTargetError,
    NoDisposeMethodError,
    SignalBagError,
    UseAfterDestroyError,
)
from signalbag.signals import Signal, SignalField, Subscription
from signalbag.value import Value

__all__ = [
    # Bag
    "Bag",
    "CallNamedMethod",
    "CancelTask",
    "DisposeAction",
    "InvokeCallable",
    "Lifetime",
    "TeardownSource",
    "infer_dispose_action",
    # Clocks
    "AnyioClock",
    "AsyncioClock",
    "Clock",
    "ClockConfig",
    "ManualClock",
    "TickHandle",
    "load_clock_config",
    # Errors
    "InvalidArgumentError",
    "InvalidAttachTargetError",
    "NoDisposeMethodError",
    "SignalBagError",
    "UseAfterDestroyError",
    # Signals
    "Signal",
    "SignalField",
    "Subscription",
    "Value",
]
