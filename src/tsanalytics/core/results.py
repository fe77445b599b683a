"""Result types.

``Outcome`` turns raised library errors into explicit values for callers
that prefer result objects; ``ForecastResult`` carries a forecast together
with the model facts needed to audit it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import pandas as pd

from tsanalytics.core.errors import TSAnalyticsError

if TYPE_CHECKING:
    from tsanalytics.series.timeseries import TimeSeries

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either a value or the library error that prevented it."""

    value: T | None = None
    error: TSAnalyticsError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or re-raise the captured error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    def unwrap_or(self, default: T) -> T:
        return default if self.error is not None else self.value  # type: ignore[return-value]


def attempt(func: Callable[..., T], *args: Any, **kwargs: Any) -> Outcome[T]:
    """Run ``func`` and capture a TSAnalyticsError as a failed Outcome.

    Exceptions that are not TSAnalyticsError (programming errors) propagate.

    Example:
        >>> out = attempt(mean, TimeSeries.empty())
        >>> out.ok, out.error.error_code
        (False, 'E_INSUFFICIENT_DATA')
    """
    try:
        return Outcome(value=func(*args, **kwargs))
    except TSAnalyticsError as exc:
        return Outcome(error=exc)


@dataclass(frozen=True)
class ForecastResult:
    """Forecast output of a fitted model.

    Future innovations are taken as zero beyond the MA order; ``notes``
    records that and any other convention applied.
    """

    forecast: TimeSeries
    order: tuple[int, int, int]
    horizon: int
    sigma2: float
    notes: tuple[str, ...] = field(default_factory=tuple)

    def to_frame(self) -> pd.DataFrame:
        """Return forecast as a DataFrame with ``ds`` and ``yhat`` columns."""
        df = self.forecast.to_frame()
        return df.rename(columns={"y": "yhat"})

    def summary(self) -> dict[str, Any]:
        p, d, q = self.order
        return {
            "model": f"ARIMA({p},{d},{q})",
            "horizon": self.horizon,
            "sigma2": round(self.sigma2, 6),
            "notes": list(self.notes),
        }


__all__ = ["Outcome", "attempt", "ForecastResult"]
