"""Moving-average stage: Hannan-Rissanen with bounded refinement.

Innovations are first estimated from a long autoregression, then the series
is regressed on its own lags and the lagged innovations. The estimates are
refined by recomputing innovations recursively from the current
coefficients and regressing again. Each refinement step is halved until the
conditional residual sum of squares does not rise by more than ``tol``;
the loop is capped at ``max_iter`` iterations.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
from scipy import signal

from tsanalytics.core.errors import EInsufficientData, EInvalidOrder, ENonConvergent
from tsanalytics.models.ar import ar_residuals
from tsanalytics.stats.autocorrelation import autocovariance, levinson_durbin
from tsanalytics.stats.regression import ols

logger = logging.getLogger(__name__)

_MAX_HALVINGS = 20


@dataclass(frozen=True)
class MaFit:
    """ARMA(p, q) coefficients for
    ``x_t = c + sum(phi_i * x_{t-i}) + e_t + sum(theta_j * e_{t-j})``.

    Attributes:
        ar: phi_1..phi_p
        ma: theta_1..theta_q
        intercept: Constant c
        sigma2: Residual variance ``rss / len(residuals)``
        residuals: Recursive innovations for t = p .. n-1
        rss_history: Residual sum of squares after each iteration
        n_iter: Refinement iterations performed
        proxy_order: Order of the long autoregression
    """

    ar: np.ndarray
    ma: np.ndarray
    intercept: float
    sigma2: float
    residuals: np.ndarray
    rss_history: tuple[float, ...]
    n_iter: int
    proxy_order: int


def default_proxy_order(n: int, p: int, q: int) -> int:
    """Long-AR order ``round(log(n)^2)``, bounded by what ``n`` supports.

    Raises:
        EInsufficientData: If no proxy order leaves room for the regression
    """
    m = max(p + q, int(round(math.log(max(n, 2)) ** 2)))
    m = min(m, (n - 1) // 2, n - p - 2 * q - 2)
    if m < 1:
        raise EInsufficientData(
            f"ARMA({p}, {q}) needs more observations for innovation estimates",
            context={"length": n, "p": p, "q": q},
        )
    return m


def arma_residuals(z: np.ndarray, ar: np.ndarray, ma: np.ndarray) -> np.ndarray:
    """Recursive innovations for t = p .. n-1 with earlier innovations zero."""
    a = ar_residuals(z, ar, 0.0)
    if ma.shape[0] == 0:
        return a
    return signal.lfilter([1.0], np.concatenate([[1.0], ma]), a)


def _css(z: np.ndarray, ar: np.ndarray, ma: np.ndarray) -> float:
    with np.errstate(over="ignore", invalid="ignore"):
        e = arma_residuals(z, ar, ma)
        return float(e @ e)


def _design(z: np.ndarray, e: np.ndarray, p: int, q: int, start: int) -> np.ndarray:
    n = z.shape[0]
    columns = [z[start - i : n - i] for i in range(1, p + 1)]
    columns += [e[start - j : n - j] for j in range(1, q + 1)]
    return np.column_stack(columns)


def fit_ma(
    values: np.ndarray,
    p: int,
    q: int,
    include_mean: bool = True,
    max_iter: int = 50,
    tol: float = 1e-6,
    proxy_order: int | None = None,
) -> MaFit:
    """Fit ARMA(p, q) by Hannan-Rissanen and iterative refinement.

    Args:
        values: Observations without missing entries (already differenced)
        p: AR order
        q: MA order, at least 1
        include_mean: Estimate a mean for the series
        max_iter: Iteration cap for the refinement loop
        tol: Relative RSS change treated as converged (and allowed rise)
        proxy_order: Long-AR order for innovations (None: automatic)

    Returns:
        MaFit

    Raises:
        EInvalidOrder: If p is negative or q < 1
        EInsufficientData: If the series is too short for the regressions
        EDegenerateInput: If a regression design is singular
        ENonConvergent: If the RSS rises beyond ``tol`` even after step
            halving, or the cap is reached before convergence; the RSS
            history is in the error context
    """
    if p < 0 or q < 1:
        raise EInvalidOrder("MA fitting needs p >= 0 and q >= 1", context={"p": p, "q": q})
    x = np.asarray(values, dtype=np.float64)
    n = x.shape[0]
    m = default_proxy_order(n, p, q) if proxy_order is None else proxy_order

    if n > p and np.ptp(x) == 0:
        intercept = float(x[0]) if include_mean else 0.0
        residuals = x[p:] - intercept
        rss = float(residuals @ residuals)
        return MaFit(
            ar=np.zeros(p),
            ma=np.zeros(q),
            intercept=intercept,
            sigma2=rss / residuals.shape[0],
            residuals=residuals,
            rss_history=(rss,),
            n_iter=0,
            proxy_order=m,
        )

    mu = float(x.mean()) if include_mean else 0.0
    z = x - mu

    # Step 1: innovations from a long autoregression
    proxy = levinson_durbin(autocovariance(z, m, demean=False), m).coefficients
    e_hat = np.zeros(n)
    e_hat[m:] = ar_residuals(z, proxy, 0.0)

    # Step 2: regress on own lags and lagged innovations
    start = max(m + q, p)
    if n - start <= p + q:
        raise EInsufficientData(
            f"ARMA({p}, {q}) with proxy order {m} needs more observations",
            context={"length": n, "p": p, "q": q, "proxy_order": m},
        )
    beta = ols(z[start:], _design(z, e_hat, p, q, start)).coefficients
    ar, ma = beta[:p].copy(), beta[p:].copy()

    rss = _css(z, ar, ma)
    history = [rss]
    if not math.isfinite(rss):
        raise ENonConvergent(
            "initial MA estimates give unbounded residuals",
            context={"ma": ma.tolist(), "rss_history": history},
        )

    n_iter = 0
    converged = rss <= np.finfo(np.float64).tiny
    start = max(p, q)
    while not converged and n_iter < max_iter:
        n_iter += 1
        e = np.zeros(n)
        e[p:] = arma_residuals(z, ar, ma)
        candidate = ols(z[start:], _design(z, e, p, q, start)).coefficients
        current = np.concatenate([ar, ma])
        direction = candidate - current

        scale = 1.0
        for _ in range(_MAX_HALVINGS + 1):
            trial = current + scale * direction
            trial_rss = _css(z, trial[:p], trial[p:])
            if math.isfinite(trial_rss) and trial_rss <= rss * (1.0 + tol):
                break
            scale /= 2.0
        else:
            raise ENonConvergent(
                "residual sum of squares increased during MA refinement",
                context={"iteration": n_iter, "rss_history": history},
            )

        ar, ma = trial[:p].copy(), trial[p:].copy()
        history.append(trial_rss)
        logger.debug(
            "MA iteration %d: rss=%.10g step=%.3g theta=%s",
            n_iter,
            trial_rss,
            scale,
            np.round(ma, 6),
        )
        converged = abs(rss - trial_rss) <= tol * rss
        rss = trial_rss

    if not converged:
        raise ENonConvergent(
            f"MA refinement did not converge within {max_iter} iterations",
            context={"max_iter": max_iter, "rss_history": history},
        )

    residuals = arma_residuals(z, ar, ma)
    return MaFit(
        ar=ar,
        ma=ma,
        intercept=mu * (1.0 - float(ar.sum())),
        sigma2=rss / residuals.shape[0],
        residuals=residuals,
        rss_history=tuple(history),
        n_iter=n_iter,
        proxy_order=m,
    )


__all__ = ["MaFit", "arma_residuals", "default_proxy_order", "fit_ma"]
