"""Models module for tsanalytics.

ARIMA estimation: differencing, the autoregressive stage, the
Hannan-Rissanen moving-average stage and forecasting.
"""

from tsanalytics.models.ar import ArFit, ar_residuals, fit_ar
from tsanalytics.models.arima import (
    ZERO_INNOVATION_NOTE,
    ArimaEstimator,
    ArimaModel,
    fit_arima,
    select_order_d,
)
from tsanalytics.models.differencing import Differenced, difference, integrate, undifference
from tsanalytics.models.ma import MaFit, arma_residuals, default_proxy_order, fit_ma

__all__ = [
    # Differencing
    "Differenced",
    "difference",
    "undifference",
    "integrate",
    "select_order_d",
    # Stages
    "ArFit",
    "fit_ar",
    "ar_residuals",
    "MaFit",
    "fit_ma",
    "arma_residuals",
    "default_proxy_order",
    # ARIMA
    "ArimaEstimator",
    "ArimaModel",
    "fit_arima",
    "ZERO_INNOVATION_NOTE",
]
