"""Core module - errors, configuration and result types.

Foundational pieces shared by every other tsanalytics module.
"""

from tsanalytics.core.config import ArimaConfig, StationarityConfig
from tsanalytics.core.errors import (
    ERROR_REGISTRY,
    EDegenerateInput,
    EInsufficientData,
    EInvalidOrder,
    EInvalidWindow,
    EMalformedInput,
    ENonConvergent,
    TSAnalyticsError,
    get_error_class,
)
from tsanalytics.core.results import ForecastResult, Outcome, attempt

__all__ = [
    # Config
    "ArimaConfig",
    "StationarityConfig",
    # Results
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
    "ERROR_REGISTRY",
    "get_error_class",
]
