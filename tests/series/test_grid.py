"""Tests for series/grid.py."""

from __future__ import annotations

import numpy as np
import pytest

from tsanalytics.contracts import GridSpec
from tsanalytics.core.errors import EInvalidWindow, EMalformedInput
from tsanalytics.series import explicit_grid, fixed_grid, grid_from_spec, grid_position


class TestFixedGrid:
    """Tests for fixed-step grids."""

    def test_includes_end(self) -> None:
        """End is included when it falls on the grid."""
        assert fixed_grid(0, 10, 5).tolist() == [0, 5, 10]

    def test_stops_before_end(self) -> None:
        """Points past end are excluded."""
        assert fixed_grid(0, 9, 4).tolist() == [0, 4, 8]

    def test_float_step(self) -> None:
        """End on a float grid is kept despite step rounding."""
        grid = fixed_grid(0.0, 0.3, 0.1)
        assert len(grid) == 4
        np.testing.assert_allclose(grid, [0.0, 0.1, 0.2, 0.3])

    def test_float_step_stops_before_end(self) -> None:
        """An end between grid points is not rounded up."""
        assert len(fixed_grid(0.0, 0.35, 0.1)) == 4

    def test_end_before_start(self) -> None:
        """Reversed bounds give an empty grid."""
        assert fixed_grid(5, 0, 1).size == 0

    @pytest.mark.parametrize("step", [0, -1])
    def test_non_positive_step(self, step: int) -> None:
        """Step must be positive."""
        with pytest.raises(EInvalidWindow):
            fixed_grid(0, 10, step)


class TestGridPosition:
    """Tests for cell lookup."""

    def test_boundaries_snap(self) -> None:
        """Timestamps on float boundaries start their own cell."""
        cells = grid_position(np.array([0.0, 0.1, 0.2, 0.3, 0.35]), 0.0, 0.1)
        assert cells.tolist() == [0, 1, 2, 3, 3]

    def test_integer_grid(self) -> None:
        """Integer timestamps floor into cells."""
        assert grid_position(np.array([0, 59, 60, 125]), 0, 60).tolist() == [0, 0, 1, 2]


class TestExplicitGrid:
    """Tests for explicit grids."""

    def test_valid(self) -> None:
        """Strictly increasing grids pass through."""
        assert explicit_grid([1, 4, 9]).tolist() == [1, 4, 9]

    def test_not_increasing(self) -> None:
        """Unordered grids are rejected."""
        with pytest.raises(EMalformedInput):
            explicit_grid([1, 1, 2])

    def test_non_finite(self) -> None:
        """NaN timestamps are rejected."""
        with pytest.raises(EMalformedInput):
            explicit_grid([0.0, np.nan])


class TestGridFromSpec:
    """Tests for GridSpec materialization."""

    def test_defaults_fill_bounds(self) -> None:
        """Missing bounds come from the defaults."""
        spec = GridSpec(step=2)
        assert grid_from_spec(spec, default_start=0, default_end=6).tolist() == [0, 2, 4, 6]

    def test_explicit(self) -> None:
        """Explicit timestamps are used as is."""
        spec = GridSpec(timestamps=[0, 3, 4])
        assert grid_from_spec(spec).tolist() == [0, 3, 4]

    def test_no_bounds(self) -> None:
        """No bounds at all gives an empty grid."""
        assert grid_from_spec(GridSpec(step=1)).size == 0

    def test_unvalidated_spec_without_step(self) -> None:
        """A spec that skipped validation and has no step is rejected."""
        spec = GridSpec.model_construct(start=0.0, end=4.0, step=None, timestamps=None)
        with pytest.raises(EMalformedInput):
            grid_from_spec(spec)
