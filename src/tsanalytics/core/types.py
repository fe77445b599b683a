"""Shared type definitions for tsanalytics.

Type aliases used across modules for clarity and consistency.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Literal

import numpy as np

# Timestamps are monotonic numeric scalars (epoch integers or floats)
Timestamp = int | float

# A value is either an observation or the missing marker None
Value = float | None

Pair = tuple[Timestamp, Value]
Pairs = Iterable[Pair]

ArrayLike = Sequence[float] | np.ndarray

InterpolationMethod = Literal["previous", "linear", "none"]
AggregationMethod = Literal["mean", "sum", "last", "first", "min", "max", "count"]
JoinHow = Literal["inner", "outer"]
RollingAggregate = Literal["mean", "var", "std", "min", "max", "sum", "count"]

__all__ = [
    "Timestamp",
    "Value",
    "Pair",
    "Pairs",
    "ArrayLike",
    "InterpolationMethod",
    "AggregationMethod",
    "JoinHow",
    "RollingAggregate",
]
