"""Differencing and its inverse.

``difference`` keeps the last ``d`` raw values as a tail and the dropped
leading timestamps, which is all that is needed to rebuild the source
exactly or to integrate forecasts made on the differenced scale.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from tsanalytics.core.errors import EInsufficientData, EInvalidOrder, EMalformedInput
from tsanalytics.series.timeseries import TimeSeries


@dataclass(frozen=True)
class Differenced:
    """A series differenced ``order`` times.

    Attributes:
        series: The differenced series (first ``order`` timestamps dropped)
        order: Number of first differences applied
        tail: Last ``order`` raw values of the source, oldest first
        head_index: Source timestamps dropped by differencing
    """

    series: TimeSeries
    order: int
    tail: np.ndarray
    head_index: np.ndarray

    def __post_init__(self) -> None:
        for name in ("tail", "head_index"):
            arr = np.array(getattr(self, name), copy=True)
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)


def _anchors(tail: np.ndarray, order: int) -> list[float]:
    # Last value of the j-th difference of the source, j = 0..order-1
    return [float(np.diff(tail, n=j)[-1]) for j in range(order)]


def difference(series: TimeSeries, d: int = 1) -> Differenced:
    """Apply first differencing ``d`` times.

    Raises:
        EInvalidOrder: If d is negative
        EMalformedInput: If the series has missing values
        EInsufficientData: If the series has ``d`` or fewer entries
    """
    if not isinstance(d, int) or isinstance(d, bool) or d < 0:
        raise EInvalidOrder(f"differencing order must be a non-negative integer, got {d!r}")
    if series.has_missing:
        raise EMalformedInput(
            "differencing needs a series without missing values",
            context={"missing": series.n_missing},
            fix_hint="Use fill_missing() or drop_missing() first",
        )
    if d == 0:
        return Differenced(series, 0, np.empty(0), np.empty(0, dtype=series.index.dtype))
    n = len(series)
    if n <= d:
        raise EInsufficientData(
            f"differencing {d} time(s) needs more than {d} values",
            context={"length": n, "d": d},
        )
    values = np.diff(series.values, n=d)
    diffed = TimeSeries._trusted(series.index[d:], values, np.ones(n - d, dtype=bool))
    return Differenced(
        series=diffed,
        order=d,
        tail=np.array(series.values[n - d :], copy=True),
        head_index=np.array(series.index[:d], copy=True),
    )


def undifference(differenced: Differenced) -> TimeSeries:
    """Rebuild the source series from a ``Differenced`` value."""
    d = differenced.order
    if d == 0:
        return differenced.series
    level = np.array(differenced.series.values, copy=True)
    for last in reversed(_anchors(differenced.tail, d)):
        # y_j[k] = y_j[k + 1] - y_{j+1}[k], walking back from the anchor
        back = last - np.cumsum(level[::-1])[::-1]
        level = np.concatenate([back, [last]])
    index = np.concatenate([differenced.head_index, differenced.series.index])
    return TimeSeries._trusted(index, level, np.ones(level.shape[0], dtype=bool))


def integrate(future: np.ndarray, tail: np.ndarray) -> np.ndarray:
    """Map values on the ``len(tail)``-differenced scale back to levels.

    ``future`` continues the differenced series directly after the source;
    ``tail`` holds the source's last raw values.

    Example:
        >>> integrate(np.array([1.0, 1.0]), np.array([10.0])).tolist()
        [11.0, 12.0]
    """
    level = np.asarray(future, dtype=np.float64)
    tail = np.asarray(tail, dtype=np.float64)
    d = tail.shape[0]
    for last in reversed(_anchors(tail, d)):
        level = last + np.cumsum(level)
    return level


__all__ = ["Differenced", "difference", "integrate", "undifference"]
