"""Disposal container and the dispose strategies it infers."""

from __future__ import annotations

from signalbag.bag.bag import Bag
from signalbag.bag.dispose import (
    CallNamedMethod,
    CancelTask,
    DisposeAction,
    InvokeCallable,
    infer_dispose_action,
)
from signalbag.bag.lifetime import Lifetime, TeardownHook, TeardownSource

__all__ = [
    "Bag",
    "CallNamedMethod",
    "CancelTask",
    "DisposeAction",
    "InvokeCallable",
    "Lifetime",
    "TeardownHook",
    "TeardownSource",
    "infer_dispose_action",
]
