"""Statistics module for tsanalytics.

Descriptive and pairwise statistics, autocorrelation structure, least
squares and the augmented Dickey-Fuller stationarity test.
"""

from .autocorrelation import (
    LevinsonResult,
    autocorrelation,
    autocovariance,
    levinson_durbin,
    partial_autocorrelation,
)
from .descriptive import (
    correlation,
    covariance,
    describe,
    mean,
    normalize_minmax,
    normalize_zscore,
    std,
    variance,
)
from .regression import OlsResult, lag_matrix, ols
from .stationarity import (
    StationarityResult,
    adf_test,
    critical_values,
    default_lags,
    is_stationary,
)

__all__ = [
    # Descriptive
    "mean",
    "variance",
    "std",
    "covariance",
    "correlation",
    "normalize_zscore",
    "normalize_minmax",
    "describe",
    # Autocorrelation
    "autocovariance",
    "autocorrelation",
    "partial_autocorrelation",
    "levinson_durbin",
    "LevinsonResult",
    # Regression
    "ols",
    "lag_matrix",
    "OlsResult",
    # Stationarity
    "adf_test",
    "is_stationary",
    "critical_values",
    "default_lags",
    "StationarityResult",
]
