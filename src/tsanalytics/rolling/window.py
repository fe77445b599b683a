"""Rolling-window computation over a TimeSeries.

The output has the same timestamps as the input. Count windows of size w
leave the first ``w - 1`` positions missing; duration windows cover
``(t - span, t]`` and are missing until ``min_periods`` observations are in
range. Missing inputs are excluded from every aggregate.

Complexity: mean, var, std, sum and count are O(n) through incremental
Welford updates; min and max are O(n) through a monotonic deque. The
running moments are re-seeded from a two-pass computation over the window each
time the window has turned over, which bounds rounding drift on long
series and keeps the amortized cost linear.
"""

from __future__ import annotations

import math

import numpy as np

from tsanalytics.contracts.specs import WindowSpec
from tsanalytics.core.errors import EInvalidWindow
from tsanalytics.core.types import RollingAggregate
from tsanalytics.rolling.moments import MonotonicExtrema, RunningMoments
from tsanalytics.series.timeseries import TimeSeries

_AGGREGATES = ("mean", "var", "std", "min", "max", "sum", "count")


def _resolve_window(series: TimeSeries, window: int | WindowSpec) -> WindowSpec:
    if isinstance(window, WindowSpec):
        spec = window
    elif isinstance(window, int) and not isinstance(window, bool):
        if window < 1:
            raise EInvalidWindow(
                f"window size must be a positive integer, got {window}",
                context={"window": window},
            )
        spec = WindowSpec(size=window)
    else:
        raise EInvalidWindow(
            "window must be an int or a WindowSpec",
            context={"window": repr(window)},
        )

    if spec.size is not None:
        if spec.size < 1 or (len(series) and spec.size > len(series)):
            raise EInvalidWindow(
                f"window size {spec.size} out of range for series of length {len(series)}",
                context={"window": spec.size, "length": len(series)},
            )
    return spec


def rolling(
    series: TimeSeries,
    window: int | WindowSpec,
    agg: RollingAggregate = "mean",
    ddof: int = 1,
) -> TimeSeries:
    """Slide a window over ``series`` and aggregate each position.

    Args:
        series: Input series
        window: Observation count or WindowSpec (count or duration)
        agg: One of mean, var, std, min, max, sum, count
        ddof: Delta degrees of freedom for var/std

    Returns:
        Derived series of the same length as ``series``

    Raises:
        EInvalidWindow: If the window size is not in ``1..len(series)``
        ValueError: If agg is unknown
    """
    if agg not in _AGGREGATES:
        raise ValueError(f"Unknown rolling aggregate: {agg}")
    spec = _resolve_window(series, window)

    n = len(series)
    out = np.full(n, np.nan)
    present = np.zeros(n, dtype=bool)
    if n == 0:
        return TimeSeries._trusted(series.index, out, present)

    index = series.index
    values = series.values
    mask = series.mask

    # Moments are kept on values shifted by a reference level so a large
    # common offset does not cancel in the running updates.
    observed = values[mask]
    shift = float(observed[0]) if observed.size else 0.0
    moments = RunningMoments()
    extrema = MonotonicExtrema("min" if agg == "min" else "max")
    track_extrema = agg in ("min", "max")

    left = 0
    pops = 0
    for i in range(n):
        if mask[i]:
            moments.push(values[i] - shift)
            if track_extrema:
                extrema.push(i, values[i])

        if spec.size is not None:
            first = i - spec.size + 1
            if first > 0 and mask[first - 1]:
                moments.pop(values[first - 1] - shift)
                pops += 1
            if first < 0:
                continue
        else:
            horizon = index[i] - spec.span
            while index[left] <= horizon:
                if mask[left]:
                    moments.pop(values[left] - shift)
                    pops += 1
                left += 1
            first = left

        # Re-seed from the window once it has fully turned over
        if pops and pops >= i - first + 1:
            current = values[first : i + 1][mask[first : i + 1]]
            shift = float(current.mean()) if current.size else shift
            moments = RunningMoments.from_array(current - shift)
            pops = 0

        if track_extrema:
            extrema.expire(first)
        if moments.count < spec.min_periods or moments.count == 0:
            continue

        if agg == "mean":
            result: float | None = moments.mean + shift
        elif agg == "var":
            result = moments.variance(ddof)
        elif agg == "std":
            var = moments.variance(ddof)
            result = None if var is None else math.sqrt(var)
        elif agg == "sum":
            result = (moments.mean + shift) * moments.count
        elif agg == "count":
            result = float(moments.count)
        else:
            result = extrema.current()

        if result is not None:
            out[i] = result
            present[i] = True

    return TimeSeries._trusted(series.index, out, present)


def rolling_mean(series: TimeSeries, window: int | WindowSpec) -> TimeSeries:
    return rolling(series, window, "mean")


def rolling_var(series: TimeSeries, window: int | WindowSpec, ddof: int = 1) -> TimeSeries:
    """Rolling sample variance (Welford); a single observation has variance 0."""
    return rolling(series, window, "var", ddof=ddof)


def rolling_std(series: TimeSeries, window: int | WindowSpec, ddof: int = 1) -> TimeSeries:
    return rolling(series, window, "std", ddof=ddof)


def rolling_min(series: TimeSeries, window: int | WindowSpec) -> TimeSeries:
    return rolling(series, window, "min")


def rolling_max(series: TimeSeries, window: int | WindowSpec) -> TimeSeries:
    return rolling(series, window, "max")


def rolling_sum(series: TimeSeries, window: int | WindowSpec) -> TimeSeries:
    return rolling(series, window, "sum")


__all__ = [
    "rolling",
    "rolling_mean",
    "rolling_var",
    "rolling_std",
    "rolling_min",
    "rolling_max",
    "rolling_sum",
]
