"""Target time grids for resampling."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from tsanalytics.contracts.specs import GridSpec
from tsanalytics.core.errors import EInvalidWindow, EMalformedInput
from tsanalytics.core.types import Timestamp

# Relative distance to an integer below which a step quotient counts as exact
_SNAP_TOL = 1e-9


def grid_position(
    t: Timestamp | np.ndarray, start: Timestamp, step: Timestamp
) -> np.ndarray:
    """Index k of the grid cell ``[start + k*step, start + (k+1)*step)`` holding ``t``.

    Quotients within a relative 1e-9 of an integer are snapped before
    flooring, so a timestamp on a cell boundary lands in the cell it starts
    even when ``step`` is not exactly representable.

    Example:
        >>> grid_position(np.array([0.3, 0.35]), 0.0, 0.1).tolist()
        [3, 3]
    """
    q = (np.asarray(t, dtype=np.float64) - start) / step
    nearest = np.round(q)
    snapped = np.abs(q - nearest) <= _SNAP_TOL * np.maximum(1.0, np.abs(nearest))
    return np.where(snapped, nearest, np.floor(q)).astype(np.int64)


def fixed_grid(start: Timestamp, end: Timestamp, step: Timestamp) -> np.ndarray:
    """Timestamps ``start + k * step`` for every k >= 0 with value <= ``end``.

    Integer inputs produce an integer grid. An ``end`` before ``start``
    gives an empty grid. ``end`` is kept when it falls on the grid up to
    floating-point rounding of the step.

    Raises:
        EInvalidWindow: If step is not positive
    """
    if not step > 0:
        raise EInvalidWindow("grid step must be positive", context={"step": step})
    if end < start:
        return np.array([], dtype=np.float64)
    n = int(grid_position(end, start, step)) + 1
    return start + np.arange(n) * step


def explicit_grid(timestamps: Sequence[Timestamp] | np.ndarray) -> np.ndarray:
    """Validate an externally supplied grid (finite, strictly increasing)."""
    grid = np.asarray(timestamps)
    if grid.ndim != 1:
        raise EMalformedInput("grid must be one-dimensional")
    if grid.size == 0:
        return grid.astype(np.float64)
    if grid.dtype.kind not in ("i", "u", "f"):
        raise EMalformedInput("grid timestamps must be numeric", context={"dtype": str(grid.dtype)})
    if not np.all(np.isfinite(grid)):
        raise EMalformedInput("grid timestamps must be finite")
    if grid.size > 1 and np.any(np.diff(grid) <= 0):
        raise EMalformedInput("grid timestamps must be strictly increasing")
    return grid


def grid_from_spec(
    spec: GridSpec,
    default_start: Timestamp | None = None,
    default_end: Timestamp | None = None,
) -> np.ndarray:
    """Materialize a GridSpec, filling missing bounds from the defaults."""
    if spec.timestamps is not None:
        return explicit_grid(spec.timestamps)
    start = spec.start if spec.start is not None else default_start
    end = spec.end if spec.end is not None else default_end
    if start is None or end is None:
        return np.array([], dtype=np.float64)
    if spec.step is None:
        raise EMalformedInput(
            "grid spec needs either step or timestamps",
            context={"spec": spec.model_dump()},
        )
    return fixed_grid(start, end, spec.step)


__all__ = ["fixed_grid", "explicit_grid", "grid_from_spec", "grid_position"]
