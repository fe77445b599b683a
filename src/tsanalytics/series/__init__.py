"""Series module for tsanalytics.

Provides the TimeSeries container, target grids and alignment/resampling.
"""

from .alignment import (
    aggregate,
    align,
    align_many,
    coalesce,
    fill_missing,
    interpolate,
    reindex,
    resample,
)
from .grid import explicit_grid, fixed_grid, grid_from_spec, grid_position
from .timeseries import TimeSeries

__all__ = [
    # Container
    "TimeSeries",
    # Grids
    "fixed_grid",
    "explicit_grid",
    "grid_from_spec",
    "grid_position",
    # Alignment
    "reindex",
    "interpolate",
    "aggregate",
    "resample",
    "coalesce",
    "align",
    "align_many",
    "fill_missing",
]
