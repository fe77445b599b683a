"""API discovery and introspection for tsanalytics.

Provides ``describe()`` which returns a machine-readable schema of the
library's public surface: version, stable APIs, error codes with fix hints
and the configuration defaults.

Usage:
    >>> from tsanalytics import describe
    >>> info = describe()
    >>> sorted(info)
    ['apis', 'defaults', 'error_codes', 'version']
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any


def describe() -> dict[str, Any]:
    """Return a machine-readable API schema for tsanalytics.

    Returns a dictionary with:
      - ``version``: library version string
      - ``apis``: mapping of task names to primary API functions
      - ``error_codes``: mapping of error codes to class/description/fix_hint
      - ``defaults``: default ArimaConfig and StationarityConfig values
    """
    import tsanalytics

    return {
        "version": tsanalytics.__version__,
        "apis": _get_apis(),
        "error_codes": _get_error_codes(),
        "defaults": _get_defaults(),
    }


def _get_apis() -> dict[str, dict[str, str]]:
    """Return the stable API surface."""
    return {
        "series": {
            "function": "TimeSeries",
            "description": "Immutable time-indexed container with missing markers",
        },
        "resample": {
            "function": "resample",
            "description": "Interpolate or aggregate a series onto a target grid",
        },
        "align": {
            "function": "align / align_many",
            "description": "Bring series onto a common timestamp index (inner/outer)",
        },
        "fill_missing": {
            "function": "fill_missing",
            "description": "Fill interior missing markers from observed neighbours",
        },
        "rolling": {
            "function": "rolling",
            "description": "Rolling mean/var/std/min/max/sum/count over count or duration windows",
        },
        "statistics": {
            "function": "mean / variance / std / covariance / correlation / describe",
            "description": "Global and pairwise statistics over observed values",
        },
        "normalize": {
            "function": "normalize_zscore / normalize_minmax",
            "description": "Standardize or rescale a series",
        },
        "autocorrelation": {
            "function": "autocorrelation / partial_autocorrelation",
            "description": "Sample ACF and PACF (Levinson-Durbin)",
        },
        "stationarity": {
            "function": "adf_test",
            "description": "Augmented Dickey-Fuller test with MacKinnon critical values",
        },
        "difference": {
            "function": "difference / undifference",
            "description": "Invertible differencing with stored tail",
        },
        "fit": {
            "function": "fit_arima / ArimaEstimator.fit",
            "description": "Fit ARIMA(p, d, q); d may be searched with the stationarity test",
        },
        "forecast": {
            "function": "ArimaModel.forecast / forecast_result",
            "description": "Multi-step forecast on the original scale",
        },
        "attempt": {
            "function": "attempt",
            "description": "Run an operation and capture library errors as an Outcome",
        },
    }


def _get_error_codes() -> dict[str, dict[str, str]]:
    """Return all error codes with descriptions and fix hints."""
    from tsanalytics.core.errors import ERROR_REGISTRY

    result: dict[str, dict[str, str]] = {}
    for code, cls in ERROR_REGISTRY.items():
        result[code] = {
            "class": cls.__name__,
            "description": (cls.__doc__ or "").strip(),
            "fix_hint": cls.fix_hint or "",
        }
    return result


def _get_defaults() -> dict[str, dict[str, Any]]:
    from tsanalytics.core.config import ArimaConfig, StationarityConfig

    return {
        "arima": asdict(ArimaConfig()),
        "stationarity": asdict(StationarityConfig()),
    }


__all__ = ["describe"]
