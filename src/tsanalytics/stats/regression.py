"""Ordinary least squares with numerical diagnostics."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from scipy import linalg

from tsanalytics.core.errors import EDegenerateInput, EInsufficientData


@dataclass(frozen=True)
class OlsResult:
    """Least-squares fit of ``y`` on the columns of ``X``."""

    coefficients: np.ndarray
    std_errors: np.ndarray
    residuals: np.ndarray
    rss: float
    sigma2: float
    rank: int
    condition_number: float
    nobs: int

    @property
    def df_resid(self) -> int:
        return self.nobs - self.coefficients.shape[0]

    def t_values(self) -> np.ndarray:
        with np.errstate(divide="ignore", invalid="ignore"):
            return self.coefficients / self.std_errors


def lag_matrix(x: np.ndarray, lags: int) -> np.ndarray:
    """Columns ``x[t-1], ..., x[t-lags]`` for ``t = lags .. len(x) - 1``."""
    x = np.asarray(x, dtype=np.float64)
    n = x.shape[0]
    if lags == 0:
        return np.empty((max(n, 0), 0))
    return np.column_stack([x[lags - j : n - j] for j in range(1, lags + 1)])


def ols(y: np.ndarray, X: np.ndarray, rcond: float = 1e-10) -> OlsResult:
    """Fit ``y ~ X`` by least squares.

    Args:
        y: Response, shape (n,)
        X: Design matrix, shape (n, k)
        rcond: Singular values below ``rcond * max`` count as zero

    Returns:
        OlsResult with coefficients, standard errors and diagnostics

    Raises:
        EInsufficientData: If there are no residual degrees of freedom
        EDegenerateInput: If the design is rank deficient; the rank and
            condition number are reported in the error context
    """
    y = np.asarray(y, dtype=np.float64)
    X = np.asarray(X, dtype=np.float64)
    n, k = X.shape
    if n - k < 1:
        raise EInsufficientData(
            "regression has no residual degrees of freedom",
            context={"nobs": n, "regressors": k},
        )

    coef, _, rank, sv = linalg.lstsq(X, y, cond=rcond)
    condition = float(sv[0] / sv[-1]) if sv.size and sv[-1] > 0 else math.inf
    if rank < k:
        raise EDegenerateInput(
            "singular regression design",
            context={"rank": int(rank), "regressors": k, "condition_number": condition},
        )

    residuals = y - X @ coef
    rss = float(residuals @ residuals)
    sigma2 = rss / (n - k)

    # (X'X)^-1 = R^-1 R^-T from the economic QR of X
    _, r = linalg.qr(X, mode="economic")
    r_inv = linalg.solve_triangular(r, np.eye(k))
    cov_diag = np.sum(r_inv * r_inv, axis=1) * sigma2
    std_errors = np.sqrt(np.maximum(cov_diag, 0.0))

    return OlsResult(
        coefficients=coef,
        std_errors=std_errors,
        residuals=residuals,
        rss=rss,
        sigma2=sigma2,
        rank=int(rank),
        condition_number=condition,
        nobs=n,
    )


__all__ = ["OlsResult", "lag_matrix", "ols"]
