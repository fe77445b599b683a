"""Global and pairwise descriptive statistics.

Missing markers are exclusions: single-series statistics use the observed
values only, pairwise statistics use the timestamps where both series are
observed (after an inner alignment when the indexes differ).
"""

from __future__ import annotations

import math
from typing import Any

import numpy as np

from tsanalytics.core.errors import EDegenerateInput, EInsufficientData
from tsanalytics.series.alignment import align
from tsanalytics.series.timeseries import TimeSeries


def _observed(series: TimeSeries, needed: int, what: str) -> np.ndarray:
    values = series.present_values()
    if values.size < needed:
        raise EInsufficientData(
            f"{what} needs at least {needed} observed value(s), got {values.size}",
            context={"observed": int(values.size), "length": len(series)},
        )
    return values


def _paired(a: TimeSeries, b: TimeSeries, what: str) -> tuple[np.ndarray, np.ndarray]:
    if not np.array_equal(a.index, b.index):
        a, b = align(a, b, how="inner")
    both = a.mask & b.mask
    x = a.values[both]
    y = b.values[both]
    if x.size < 2:
        raise EInsufficientData(
            f"{what} needs at least 2 overlapping observations, got {x.size}",
            context={"overlap": int(x.size)},
        )
    return x, y


def mean(series: TimeSeries) -> float:
    """Mean of the observed values.

    Raises:
        EInsufficientData: If the series has no observed values
    """
    return float(np.mean(_observed(series, 1, "mean")))


def variance(series: TimeSeries, ddof: int = 1) -> float:
    """Variance of the observed values (ddof=1 sample, ddof=0 population).

    Raises:
        EInsufficientData: If fewer than ``ddof + 1`` observed values
    """
    values = _observed(series, ddof + 1, "variance")
    return float(np.var(values, ddof=ddof))


def std(series: TimeSeries, ddof: int = 1) -> float:
    return math.sqrt(variance(series, ddof=ddof))


def covariance(a: TimeSeries, b: TimeSeries, ddof: int = 1) -> float:
    """Covariance over the pairwise-observed timestamps of ``a`` and ``b``."""
    x, y = _paired(a, b, "covariance")
    if x.size <= ddof:
        raise EInsufficientData(
            f"covariance with ddof={ddof} needs more than {ddof} pairs",
            context={"overlap": int(x.size)},
        )
    dx = x - x.mean()
    dy = y - y.mean()
    return float(np.dot(dx, dy) / (x.size - ddof))


def correlation(a: TimeSeries, b: TimeSeries) -> float:
    """Pearson correlation over the pairwise-observed timestamps.

    Raises:
        EInsufficientData: If fewer than 2 overlapping observations
        EDegenerateInput: If either side is constant over the overlap
    """
    x, y = _paired(a, b, "correlation")
    if np.ptp(x) == 0 or np.ptp(y) == 0:
        raise EDegenerateInput(
            "correlation is undefined for a constant series",
            context={"overlap": int(x.size)},
        )
    dx = x - x.mean()
    dy = y - y.mean()
    r = np.dot(dx, dy) / math.sqrt(np.dot(dx, dx) * np.dot(dy, dy))
    return float(min(1.0, max(-1.0, r)))


def normalize_zscore(series: TimeSeries, ddof: int = 1) -> TimeSeries:
    """Standardize observed values to mean 0 and standard deviation 1.

    Raises:
        EInsufficientData: If fewer than 2 observed values
        EDegenerateInput: If the series is constant
    """
    values = _observed(series, max(2, ddof + 1), "z-score normalization")
    if np.ptp(values) == 0:
        raise EDegenerateInput("cannot z-score a constant series (zero variance)")
    mu = values.mean()
    sigma = values.std(ddof=ddof)
    out = (series.values - mu) / sigma
    return TimeSeries._trusted(series.index, out, series.mask)


def normalize_minmax(
    series: TimeSeries,
    feature_range: tuple[float, float] = (0.0, 1.0),
) -> TimeSeries:
    """Rescale observed values linearly onto ``feature_range``.

    Raises:
        EInsufficientData: If the series has no observed values
        EDegenerateInput: If the series is constant
    """
    lo, hi = feature_range
    if not hi > lo:
        raise ValueError(f"feature_range must be increasing, got {feature_range}")
    values = _observed(series, 1, "min-max normalization")
    vmin, vmax = values.min(), values.max()
    if vmax == vmin:
        raise EDegenerateInput("cannot min-max scale a constant series")
    out = lo + (series.values - vmin) * (hi - lo) / (vmax - vmin)
    return TimeSeries._trusted(series.index, out, series.mask)


def describe(series: TimeSeries) -> dict[str, Any]:
    """Summary of a series; never raises for short input."""
    values = series.present_values()
    summary: dict[str, Any] = {"length": len(series), "missing": series.n_missing}
    summary["count"] = int(values.size)
    if values.size == 0:
        return summary
    summary.update(
        {
            "mean": float(np.mean(values)),
            "std": float(np.std(values, ddof=1)) if values.size > 1 else None,
            "min": float(np.min(values)),
            "max": float(np.max(values)),
            "median": float(np.median(values)),
        }
    )
    return summary


__all__ = [
    "mean",
    "variance",
    "std",
    "covariance",
    "correlation",
    "normalize_zscore",
    "normalize_minmax",
    "describe",
]
