"""Tests for pydantic parameter specs."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from tsanalytics.contracts import GridSpec, ResampleSpec, WindowSpec


class TestWindowSpec:
    """Test window spec validation."""

    def test_count_window(self) -> None:
        """Size-only window is a count window."""
        spec = WindowSpec(size=3)
        assert not spec.is_duration
        assert spec.min_periods == 1

    def test_duration_window(self) -> None:
        """Span-only window is a duration window."""
        spec = WindowSpec(span=60.0, min_periods=2)
        assert spec.is_duration
        assert spec.min_periods == 2

    def test_exactly_one(self) -> None:
        """Size and span are mutually exclusive and one is required."""
        with pytest.raises(ValidationError):
            WindowSpec()
        with pytest.raises(ValidationError):
            WindowSpec(size=2, span=10.0)

    def test_non_positive_span(self) -> None:
        """Span must be positive."""
        with pytest.raises(ValidationError):
            WindowSpec(span=0.0)

    def test_min_periods_bound(self) -> None:
        """min_periods must be at least one."""
        with pytest.raises(ValidationError):
            WindowSpec(size=2, min_periods=0)

    def test_extra_forbidden(self) -> None:
        """Unknown fields are rejected."""
        with pytest.raises(ValidationError):
            WindowSpec(size=2, center=True)  # type: ignore[call-arg]

    def test_frozen(self) -> None:
        """Specs are immutable."""
        spec = WindowSpec(size=2)
        with pytest.raises(ValidationError):
            spec.size = 3  # type: ignore[misc]


class TestGridSpec:
    """Test grid spec validation."""

    def test_step_grid(self) -> None:
        """Step grid with bounds."""
        spec = GridSpec(start=0, end=10, step=2)
        assert not spec.is_explicit

    def test_explicit_grid(self) -> None:
        """Explicit timestamps."""
        spec = GridSpec(timestamps=[0, 5, 7])
        assert spec.is_explicit

    def test_requires_one_source(self) -> None:
        """Exactly one of step/timestamps."""
        with pytest.raises(ValidationError):
            GridSpec()
        with pytest.raises(ValidationError):
            GridSpec(step=1, timestamps=[0, 1])

    def test_explicit_with_bounds(self) -> None:
        """Explicit grids do not take bounds."""
        with pytest.raises(ValidationError):
            GridSpec(start=0, timestamps=[0, 1])

    def test_json_roundtrip(self) -> None:
        """Specs serialize to JSON and back."""
        spec = GridSpec(start=0, end=4, step=1)
        assert GridSpec.model_validate_json(spec.model_dump_json()) == spec


class TestResampleSpec:
    """Test resample policy spec."""

    def test_defaults(self) -> None:
        """Linear interpolation and mean aggregation by default."""
        spec = ResampleSpec()
        assert (spec.method, spec.agg, spec.mode) == ("linear", "mean", "auto")

    def test_invalid_method(self) -> None:
        """Unknown methods are rejected."""
        with pytest.raises(ValidationError):
            ResampleSpec(method="cubic")  # type: ignore[arg-type]
