"""tsanalytics - Analytical core for numeric time series.

Immutable time series with missing markers, resampling and alignment over
irregular timestamps, rolling-window statistics, stationarity testing and
ARIMA estimation.

Basic usage:
    >>> from tsanalytics import TimeSeries, rolling_mean
    >>> ts = TimeSeries.from_pairs([(0, 1.0), (1, 2.0), (2, 3.0)])
    >>> rolling_mean(ts, 2).to_pairs()
    [(0, None), (1, 1.5), (2, 2.5)]

Modeling:
    >>> from tsanalytics import fit_arima
    >>> model = fit_arima(ts_long, order=(1, None, 0))  # d searched by ADF
    >>> model.forecast(7)

Explicit results:
    >>> from tsanalytics import attempt, mean
    >>> outcome = attempt(mean, TimeSeries.empty())
    >>> outcome.ok
    False
"""

__version__ = "0.3.0"

# Core
from tsanalytics.core.config import ArimaConfig, StationarityConfig
from tsanalytics.core.errors import (
    EDegenerateInput,
    EInsufficientData,
    EInvalidOrder,
    EInvalidWindow,
    EMalformedInput,
    ENonConvergent,
    TSAnalyticsError,
)
from tsanalytics.core.results import ForecastResult, Outcome, attempt

# Contracts
from tsanalytics.contracts import GridSpec, ResampleSpec, WindowSpec

# Discovery
from tsanalytics.discovery import describe

# Models
from tsanalytics.models import (
    ArimaEstimator,
    ArimaModel,
    difference,
    fit_arima,
    integrate,
    select_order_d,
    undifference,
)

# Rolling
from tsanalytics.rolling import (
    RunningMoments,
    rolling,
    rolling_max,
    rolling_mean,
    rolling_min,
    rolling_std,
    rolling_sum,
    rolling_var,
)

# Series
from tsanalytics.series import (
    TimeSeries,
    aggregate,
    align,
    align_many,
    coalesce,
    fill_missing,
    fixed_grid,
    interpolate,
    reindex,
    resample,
)

# Statistics
from tsanalytics.stats import (
    StationarityResult,
    adf_test,
    autocorrelation,
    autocovariance,
    correlation,
    covariance,
    is_stationary,
    levinson_durbin,
    mean,
    normalize_minmax,
    normalize_zscore,
    partial_autocorrelation,
    std,
    variance,
)
from tsanalytics.stats import describe as describe_series

__all__ = [
    "__version__",
    # Core
    "ArimaConfig",
    "StationarityConfig",
    "ForecastResult",
    "Outcome",
    "attempt",
    # Errors
    "TSAnalyticsError",
    "EMalformedInput",
    "EInvalidWindow",
    "EInvalidOrder",
    "EInsufficientData",
    "EDegenerateInput",
    "ENonConvergent",
    # Contracts
    "WindowSpec",
    "GridSpec",
    "ResampleSpec",
    # Series
    "TimeSeries",
    "fixed_grid",
    "reindex",
    "interpolate",
    "aggregate",
    "resample",
    "coalesce",
    "align",
    "align_many",
    "fill_missing",
    # Rolling
    "RunningMoments",
    "rolling",
    "rolling_mean",
    "rolling_var",
    "rolling_std",
    "rolling_min",
    "rolling_max",
    "rolling_sum",
    # Statistics
    "mean",
    "variance",
    "std",
    "covariance",
    "correlation",
    "normalize_zscore",
    "normalize_minmax",
    "describe_series",
    "autocovariance",
    "autocorrelation",
    "partial_autocorrelation",
    "levinson_durbin",
    "adf_test",
    "is_stationary",
    "StationarityResult",
    # Models
    "difference",
    "undifference",
    "integrate",
    "select_order_d",
    "ArimaEstimator",
    "ArimaModel",
    "fit_arima",
    # Discovery
    "describe",
]
