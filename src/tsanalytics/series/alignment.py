"""Time alignment and resampling utilities.

Moves series onto common or target time grids. Upsampling interpolates
(previous-value hold, linear, or no fill), downsampling aggregates the
points of each half-open bucket ``[t, t + step)``. Positions that cannot be
filled carry the missing marker; nothing is extrapolated or zero-filled.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from functools import reduce

import numpy as np
import pandas as pd

from tsanalytics.contracts.specs import GridSpec, ResampleSpec
from tsanalytics.core.errors import EInvalidWindow, EMalformedInput
from tsanalytics.core.types import (
    AggregationMethod,
    InterpolationMethod,
    JoinHow,
    Timestamp,
    Value,
)
from tsanalytics.series.grid import explicit_grid, fixed_grid, grid_from_spec, grid_position
from tsanalytics.series.timeseries import TimeSeries

logger = logging.getLogger(__name__)

GridLike = GridSpec | Sequence[Timestamp] | np.ndarray


def reindex(series: TimeSeries, index: Sequence[Timestamp] | np.ndarray) -> TimeSeries:
    """Place ``series`` on ``index`` by exact timestamp match.

    Timestamps of ``index`` absent from the series get the missing marker.
    """
    grid = explicit_grid(index)
    out = np.full(grid.shape[0], np.nan)
    present = np.zeros(grid.shape[0], dtype=bool)
    if grid.size and len(series):
        pos = np.searchsorted(series.index, grid, side="left")
        clipped = np.minimum(pos, len(series) - 1)
        exact = (pos < len(series)) & (series.index[clipped] == grid)
        out[exact] = series.values[clipped[exact]]
        present[exact] = series.mask[clipped[exact]]
    return TimeSeries._trusted(grid, out, present)


def interpolate(
    series: TimeSeries,
    grid: Sequence[Timestamp] | np.ndarray,
    method: InterpolationMethod = "linear",
) -> TimeSeries:
    """Upsample ``series`` onto ``grid``.

    Grid points that coincide with a source timestamp take that entry as is
    (a missing entry stays missing). Other points between the first and last
    observed values are filled by ``method``; points outside that range are
    missing.

    Args:
        series: Source series
        grid: Strictly increasing target timestamps
        method: 'previous' (hold last observation), 'linear', or 'none'

    Returns:
        New series indexed by ``grid``

    Raises:
        ValueError: If method is unknown
    """
    if method not in ("previous", "linear", "none"):
        raise ValueError(f"Unknown interpolation method: {method}")

    result = reindex(series, grid)
    if method == "none" or result.is_empty:
        return result

    obs_t = series.present_index()
    obs_v = series.present_values()
    if obs_t.size == 0:
        return result

    target = result.index
    exact = np.isin(target, series.index)
    inside = ~exact & (target >= obs_t[0]) & (target <= obs_t[-1])
    if not np.any(inside):
        return result

    out = np.array(result.values, copy=True)
    present = np.array(result.mask, copy=True)
    if method == "previous":
        k = np.searchsorted(obs_t, target[inside], side="right") - 1
        out[inside] = obs_v[k]
    else:
        out[inside] = np.interp(target[inside], obs_t, obs_v)
    present[inside] = True
    return TimeSeries._trusted(target, out, present)


def aggregate(
    series: TimeSeries,
    step: Timestamp,
    agg: AggregationMethod = "mean",
    start: Timestamp | None = None,
    end: Timestamp | None = None,
) -> TimeSeries:
    """Downsample ``series`` into buckets ``[t, t + step)``.

    Bucket starts are ``start + k * step`` up to ``end`` (defaults: the
    first and last source timestamps). Missing source entries are excluded;
    a bucket without observations yields the missing marker.

    Args:
        series: Source series
        step: Bucket width
        agg: Aggregation function (default: "mean")
        start: First bucket start
        end: Last admissible bucket start

    Returns:
        New series indexed by bucket starts

    Raises:
        EInvalidWindow: If step is not positive
        ValueError: If agg is unknown
    """
    if not step > 0:
        raise EInvalidWindow("bucket step must be positive", context={"step": step})
    if agg not in ("mean", "sum", "last", "first", "min", "max", "count"):
        raise ValueError(f"Unknown aggregation function: {agg}")

    start = series.start if start is None else start
    end = series.end if end is None else end
    if start is None or end is None:
        return TimeSeries.empty()

    grid = fixed_grid(start, end, step)
    nb = grid.shape[0]
    if nb == 0:
        return TimeSeries.empty()

    obs_t = series.present_index()
    obs_v = series.present_values()
    bucket = grid_position(obs_t, start, step)
    keep = (bucket >= 0) & (bucket < nb)

    grouped = pd.Series(obs_v[keep]).groupby(bucket[keep])
    if agg == "sum":
        aggregated = grouped.sum()
    elif agg == "mean":
        aggregated = grouped.mean()
    elif agg == "last":
        aggregated = grouped.last()
    elif agg == "first":
        aggregated = grouped.first()
    elif agg == "max":
        aggregated = grouped.max()
    elif agg == "min":
        aggregated = grouped.min()
    else:
        aggregated = grouped.count()

    filled = aggregated.reindex(range(nb))
    out = filled.to_numpy(dtype=np.float64, na_value=np.nan)
    return TimeSeries._trusted(grid, out, ~np.isnan(out))


def resample(
    series: TimeSeries,
    target: GridLike | float | int,
    method: InterpolationMethod = "linear",
    agg: AggregationMethod = "mean",
    mode: str = "auto",
    spec: ResampleSpec | None = None,
) -> TimeSeries:
    """Resample ``series`` onto a target grid.

    ``target`` is either a fixed step (number), a GridSpec, or an explicit
    sequence of timestamps. Explicit grids are always interpolated. For a
    fixed step, ``mode='auto'`` aggregates when the step is coarser than
    the median source spacing and interpolates otherwise.

    Args:
        series: Source series
        target: Step, GridSpec, or explicit timestamps
        method: Interpolation policy for upsampling
        agg: Aggregation policy for downsampling
        mode: 'auto', 'upsample' or 'downsample'
        spec: Optional ResampleSpec overriding method, agg and mode

    Returns:
        Resampled series
    """
    if spec is not None:
        method, agg, mode = spec.method, spec.agg, spec.mode
    if mode not in ("auto", "upsample", "downsample"):
        raise ValueError(f"Unknown resample mode: {mode}")

    if isinstance(target, GridSpec):
        if target.is_explicit:
            step = None
            start = end = None
        else:
            step = target.step
            start = target.start if target.start is not None else series.start
            end = target.end if target.end is not None else series.end
    elif np.isscalar(target) and not isinstance(target, (bool, str)):
        step, start, end = target, series.start, series.end
    else:
        step = None
        start = end = None

    if step is None:
        if mode == "downsample":
            raise ValueError("downsampling needs a fixed step, not explicit timestamps")
        grid = (
            grid_from_spec(target) if isinstance(target, GridSpec) else explicit_grid(target)
        )
        return interpolate(series, grid, method=method)

    if not step > 0:
        raise EInvalidWindow("resample step must be positive", context={"step": step})

    if mode == "auto":
        source_step = series.inferred_step()
        mode = "downsample" if source_step is not None and step > source_step else "upsample"
    logger.debug("resample step=%s mode=%s", step, mode)

    if mode == "downsample":
        return aggregate(series, step, agg=agg, start=start, end=end)
    if start is None or end is None:
        return TimeSeries.empty()
    return interpolate(series, fixed_grid(start, end, step), method=method)


def coalesce(
    timestamps: Sequence[Timestamp] | np.ndarray,
    values: Sequence[Value] | np.ndarray,
    duplicates: str = "reject",
) -> TimeSeries:
    """Build a series from unordered raw pairs, resolving duplicate timestamps.

    Args:
        timestamps: Raw timestamps in any order
        values: Matching values (None for missing)
        duplicates: 'reject' or an aggregation ('mean', 'sum', 'first',
            'last', 'min', 'max') applied to the observed values of each
            repeated timestamp

    Returns:
        Sorted series with unique timestamps

    Raises:
        EMalformedInput: If duplicates are rejected and present, lengths
            differ, or a value is non-finite
    """
    if duplicates not in ("reject", "mean", "sum", "first", "last", "min", "max"):
        raise ValueError(f"Unknown duplicate policy: {duplicates}")

    t = np.asarray(timestamps)
    if t.dtype.kind == "f" and not np.all(np.isfinite(t)):
        raise EMalformedInput("timestamps must be finite")
    raw = list(values)
    if t.shape[0] != len(raw):
        raise EMalformedInput(
            "timestamps and values must have the same length",
            context={"n_index": int(t.shape[0]), "n_values": len(raw)},
        )
    if not raw:
        return TimeSeries.empty()
    v = np.array([np.nan if x is None else x for x in raw], dtype=np.float64)
    observed = np.array([x is not None for x in raw], dtype=bool)
    if not np.all(np.isfinite(v[observed])):
        raise EMalformedInput("values must be finite; use None for a missing entry")

    df = pd.DataFrame({"ds": t, "y": v})
    counts = df.groupby("ds", sort=True)["y"].size()
    dup = counts[counts > 1]
    if len(dup) and duplicates == "reject":
        raise EMalformedInput(
            "duplicate timestamps found",
            context={"duplicates": dup.index.tolist()[:10], "n_duplicates": int(len(dup))},
            fix_hint="Pass duplicates='mean' (or 'last', 'sum', ...) to resolve them",
        )

    grouped = df.groupby("ds", sort=True)["y"]
    if duplicates in ("reject", "mean"):
        merged = grouped.mean()
    elif duplicates == "sum":
        # min_count keeps all-missing groups missing instead of 0
        merged = grouped.sum(min_count=1)
    elif duplicates == "first":
        merged = grouped.first()
    elif duplicates == "last":
        merged = grouped.last()
    elif duplicates == "min":
        merged = grouped.min()
    else:
        merged = grouped.max()

    out = merged.to_numpy(dtype=np.float64, na_value=np.nan)
    return TimeSeries(merged.index.to_numpy(), out, mask=~np.isnan(out))


def align_many(
    series: Sequence[TimeSeries],
    how: JoinHow = "inner",
    grid: GridLike | float | int | None = None,
    method: InterpolationMethod = "linear",
    agg: AggregationMethod = "mean",
) -> list[TimeSeries]:
    """Put several series on one common timestamp index.

    With ``grid`` set, every series is first resampled onto it. Otherwise
    ``how='inner'`` keeps timestamps present in all series and
    ``how='outer'`` keeps the union, marking absent entries missing.
    """
    if how not in ("inner", "outer"):
        raise ValueError(f"Unknown join: {how}")
    if not series:
        return []

    if grid is not None:
        resampled = [resample(s, grid, method=method, agg=agg) for s in series]
        indexes = [s.index for s in resampled]
        if all(np.array_equal(indexes[0], idx) for idx in indexes[1:]):
            return resampled
        series = resampled

    combine = np.intersect1d if how == "inner" else np.union1d
    common = reduce(combine, (s.index for s in series))
    # Mixed int/float indexes promote to float; keep the first series' integer
    # timestamps when every common timestamp is integral.
    lead = series[0].index.dtype
    if common.dtype != lead and lead.kind in "iu" and np.all(np.mod(common, 1) == 0):
        common = common.astype(lead)
    return [reindex(s, common) for s in series]


def align(
    a: TimeSeries,
    b: TimeSeries,
    how: JoinHow = "inner",
    grid: GridLike | float | int | None = None,
    method: InterpolationMethod = "linear",
    agg: AggregationMethod = "mean",
) -> tuple[TimeSeries, TimeSeries]:
    """Align two series for paired analysis (inner join by default)."""
    left, right = align_many([a, b], how=how, grid=grid, method=method, agg=agg)
    return left, right


def fill_missing(series: TimeSeries, method: InterpolationMethod = "linear") -> TimeSeries:
    """Fill interior missing markers from the neighbouring observations.

    Entries before the first or after the last observation stay missing.
    """
    if method == "none":
        return series
    return interpolate(series.drop_missing(), series.index, method=method)


__all__ = [
    "reindex",
    "interpolate",
    "aggregate",
    "resample",
    "coalesce",
    "align",
    "align_many",
    "fill_missing",
]
