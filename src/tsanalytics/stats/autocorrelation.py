"""Autocovariance, autocorrelation and the Levinson-Durbin recursion."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from tsanalytics.core.errors import (
    EDegenerateInput,
    EInsufficientData,
    EInvalidOrder,
)
from tsanalytics.series.timeseries import TimeSeries


@dataclass(frozen=True)
class LevinsonResult:
    """Solution of the Yule-Walker equations of a given order.

    Attributes:
        coefficients: AR coefficients phi_1..phi_p
        sigma2: Innovation variance of the order-p predictor
        reflection: Reflection coefficients (the partial autocorrelations)
    """

    coefficients: np.ndarray
    sigma2: float
    reflection: np.ndarray


def _as_arrays(x: TimeSeries | np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    if isinstance(x, TimeSeries):
        return np.array(x.values, copy=True), np.array(x.mask, copy=True)
    arr = np.asarray(x, dtype=np.float64)
    return arr, np.ones(arr.shape[0], dtype=bool)


def autocovariance(
    x: TimeSeries | np.ndarray,
    nlags: int,
    demean: bool = True,
) -> np.ndarray:
    """Biased sample autocovariance for lags ``0..nlags``.

    Pairs with a missing side are skipped; sums are divided by the number
    of observed values, which keeps the sequence valid for Levinson-Durbin
    on complete data. With ``demean=False`` the values are taken as
    already centered.

    Raises:
        EInvalidOrder: If nlags is negative
        EInsufficientData: If nlags is not below the number of observations
    """
    if nlags < 0:
        raise EInvalidOrder(f"nlags must be non-negative, got {nlags}")
    values, mask = _as_arrays(x)
    n_obs = int(np.count_nonzero(mask))
    if n_obs <= nlags:
        raise EInsufficientData(
            f"autocovariance up to lag {nlags} needs more than {nlags} observations",
            context={"observed": n_obs, "nlags": nlags},
        )
    offset = values[mask].mean() if demean else 0.0
    centered = np.where(mask, values - offset, 0.0)
    n = centered.shape[0]
    acov = np.empty(nlags + 1)
    for k in range(nlags + 1):
        acov[k] = np.dot(centered[k:], centered[: n - k]) / n_obs
    return acov


def autocorrelation(x: TimeSeries | np.ndarray, nlags: int) -> np.ndarray:
    """Sample autocorrelation for lags ``0..nlags``.

    Raises:
        EDegenerateInput: If the series is constant
    """
    acov = autocovariance(x, nlags)
    if acov[0] == 0:
        raise EDegenerateInput("autocorrelation is undefined for a constant series")
    return acov / acov[0]


def levinson_durbin(acov: np.ndarray, order: int) -> LevinsonResult:
    """Solve the Yule-Walker equations by the Levinson-Durbin recursion.

    O(order^2) and without forming the Toeplitz matrix. A zero-variance
    sequence yields zero coefficients. If the prediction error vanishes
    before ``order`` (a perfectly predictable sequence), the remaining
    coefficients stay zero.

    Args:
        acov: Autocovariances for lags 0..order (at least)
        order: AR order p

    Returns:
        LevinsonResult

    Raises:
        EInsufficientData: If fewer than ``order + 1`` autocovariances
        EDegenerateInput: If the lag-0 autocovariance is negative
    """
    r = np.asarray(acov, dtype=np.float64)
    if order < 0:
        raise EInvalidOrder(f"order must be non-negative, got {order}")
    if r.shape[0] < order + 1:
        raise EInsufficientData(
            f"order {order} needs {order + 1} autocovariances, got {r.shape[0]}",
        )
    phi = np.zeros(order)
    reflection = np.zeros(order)
    sigma2 = float(r[0]) if r.shape[0] else 0.0
    if sigma2 < 0:
        raise EDegenerateInput("lag-0 autocovariance is negative", context={"acov0": sigma2})
    if sigma2 == 0 or order == 0:
        return LevinsonResult(phi, sigma2, reflection)

    floor = r[0] * np.finfo(np.float64).eps
    for k in range(1, order + 1):
        acc = r[k] - np.dot(phi[: k - 1], r[k - 1 : 0 : -1])
        kappa = acc / sigma2
        previous = phi[: k - 1].copy()
        phi[: k - 1] = previous - kappa * previous[::-1]
        phi[k - 1] = kappa
        reflection[k - 1] = kappa
        sigma2 *= 1.0 - kappa * kappa
        if sigma2 <= floor:
            sigma2 = 0.0
            break
    return LevinsonResult(phi, float(sigma2), reflection)


def partial_autocorrelation(x: TimeSeries | np.ndarray, nlags: int) -> np.ndarray:
    """Partial autocorrelation for lags ``0..nlags`` (lag 0 is 1.0)."""
    acov = autocovariance(x, nlags)
    if acov[0] == 0:
        raise EDegenerateInput("partial autocorrelation is undefined for a constant series")
    result = levinson_durbin(acov, nlags)
    return np.concatenate([[1.0], result.reflection])


__all__ = [
    "LevinsonResult",
    "autocovariance",
    "autocorrelation",
    "levinson_durbin",
    "partial_autocorrelation",
]
