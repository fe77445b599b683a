"""Pydantic specs for windows, grids and resampling policies.

These models are the JSON-serializable parameter contracts consumed by the
rolling and alignment operations.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tsanalytics.core.types import AggregationMethod, InterpolationMethod

ResampleMode = Literal["auto", "upsample", "downsample"]


class BaseSpec(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class WindowSpec(BaseSpec):
    """Sliding window: a count of observations or a duration span.

    A count window of ``size`` covers the current observation and the
    ``size - 1`` before it. A duration window covers ``(t - span, t]``.
    """

    size: int | None = None
    span: float | None = None
    min_periods: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _exactly_one(self) -> WindowSpec:
        if (self.size is None) == (self.span is None):
            raise ValueError("window spec needs exactly one of size or span")
        if self.span is not None and not self.span > 0:
            raise ValueError(f"span must be positive, got {self.span}")
        return self

    @property
    def is_duration(self) -> bool:
        return self.span is not None


class GridSpec(BaseSpec):
    """Target timestamps: a fixed step between bounds, or an explicit list."""

    start: float | None = None
    end: float | None = None
    step: float | None = None
    timestamps: list[float] | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> GridSpec:
        if (self.step is None) == (self.timestamps is None):
            raise ValueError("grid spec needs exactly one of step or timestamps")
        if self.timestamps is not None and (self.start is not None or self.end is not None):
            raise ValueError("explicit timestamps cannot be combined with start/end")
        return self

    @property
    def is_explicit(self) -> bool:
        return self.timestamps is not None


class ResampleSpec(BaseSpec):
    """Interpolation and aggregation policy for resampling."""

    method: InterpolationMethod = "linear"
    agg: AggregationMethod = "mean"
    mode: ResampleMode = "auto"


__all__ = [
    "BaseSpec",
    "WindowSpec",
    "GridSpec",
    "ResampleSpec",
    "ResampleMode",
]
