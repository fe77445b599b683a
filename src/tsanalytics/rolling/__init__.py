"""Rolling-window engine.

Sliding-window aggregates with incremental (Welford) moments and
monotonic-deque extrema.
"""

from .moments import MonotonicExtrema, RunningMoments, moments_by_chunks
from .window import (
    rolling,
    rolling_max,
    rolling_mean,
    rolling_min,
    rolling_std,
    rolling_sum,
    rolling_var,
)

__all__ = [
    # Engine
    "rolling",
    "rolling_mean",
    "rolling_var",
    "rolling_std",
    "rolling_min",
    "rolling_max",
    "rolling_sum",
    # Accumulators
    "RunningMoments",
    "MonotonicExtrema",
    "moments_by_chunks",
]
