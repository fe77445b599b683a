"""Autoregressive stage: Yule-Walker (Levinson-Durbin) or least squares."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

import numpy as np

from tsanalytics.core.errors import EInsufficientData, EInvalidOrder
from tsanalytics.stats.autocorrelation import autocovariance, levinson_durbin
from tsanalytics.stats.regression import lag_matrix, ols

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArFit:
    """AR(p) coefficients for ``x_t = c + sum(phi_i * x_{t-i}) + e_t``.

    Attributes:
        coefficients: phi_1..phi_p
        intercept: Constant c (zero without a mean term)
        sigma2: Residual variance ``rss / len(residuals)``
        residuals: One-step errors for t = p .. n-1
        method: Solver used
    """

    coefficients: np.ndarray
    intercept: float
    sigma2: float
    residuals: np.ndarray
    method: str

    @property
    def order(self) -> int:
        return int(self.coefficients.shape[0])


def ar_residuals(x: np.ndarray, coefficients: np.ndarray, intercept: float) -> np.ndarray:
    """One-step prediction errors for t = p .. n-1."""
    p = coefficients.shape[0]
    if p == 0:
        return x - intercept
    return x[p:] - intercept - lag_matrix(x, p) @ coefficients


def fit_ar(
    values: np.ndarray,
    p: int,
    method: Literal["levinson", "ols"] = "levinson",
    include_mean: bool = True,
) -> ArFit:
    """Fit AR(p) coefficients to complete data.

    A constant input has zero autocovariance and yields zero coefficients
    with the constant as intercept, whatever the method.

    Args:
        values: Observations without missing entries
        p: AR order
        method: 'levinson' solves the Yule-Walker equations with the
            Levinson-Durbin recursion; 'ols' regresses on the lag matrix
        include_mean: Estimate an intercept

    Raises:
        EInvalidOrder: If p is negative or method is unknown
        EInsufficientData: If there are too few observations for order p
        EDegenerateInput: If the OLS design is singular
    """
    x = np.asarray(values, dtype=np.float64)
    n = x.shape[0]
    if p < 0:
        raise EInvalidOrder(f"AR order must be non-negative, got {p}")
    if method not in ("levinson", "ols"):
        raise EInvalidOrder(f"unknown AR method {method!r}", context={"method": method})
    if n <= p:
        raise EInsufficientData(
            f"AR({p}) needs more than {p} observations, got {n}",
            context={"length": n, "p": p},
        )

    if np.ptp(x) == 0:
        phi = np.zeros(p)
        intercept = float(x[0]) if include_mean else 0.0
    elif method == "levinson":
        mu = float(x.mean()) if include_mean else 0.0
        acov = autocovariance(x - mu, p, demean=False)
        phi = levinson_durbin(acov, p).coefficients
        intercept = mu * (1.0 - float(phi.sum()))
    else:
        X = lag_matrix(x, p)
        if include_mean:
            X = np.column_stack([X, np.ones(n - p)])
        fit = ols(x[p:], X)
        phi = fit.coefficients[:p].copy()
        intercept = float(fit.coefficients[p]) if include_mean else 0.0

    residuals = ar_residuals(x, phi, intercept)
    sigma2 = float(residuals @ residuals) / residuals.shape[0]
    logger.debug("AR(%d) via %s: phi=%s sigma2=%.6g", p, method, np.round(phi, 6), sigma2)
    return ArFit(
        coefficients=phi,
        intercept=intercept,
        sigma2=sigma2,
        residuals=residuals,
        method=method,
    )


__all__ = ["ArFit", "ar_residuals", "fit_ar"]
