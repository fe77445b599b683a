"""ARIMA estimation and forecasting.

``ArimaEstimator`` composes differencing, the AR stage and (for q > 0) the
Hannan-Rissanen MA stage into one fit. The fitted ``ArimaModel`` is an
immutable value holding coefficients, residuals and the trailing raw values
needed to invert differencing; forecasting never mutates it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from tsanalytics.core.config import ArimaConfig, StationarityConfig
from tsanalytics.core.errors import (
    EInsufficientData,
    EInvalidOrder,
    EMalformedInput,
    ENonConvergent,
)
from tsanalytics.core.results import ForecastResult
from tsanalytics.models.ar import fit_ar
from tsanalytics.models.differencing import difference, integrate
from tsanalytics.models.ma import fit_ma
from tsanalytics.series.timeseries import TimeSeries
from tsanalytics.stats.stationarity import StationarityResult, adf_test

logger = logging.getLogger(__name__)

ZERO_INNOVATION_NOTE = "future innovations are taken as zero beyond the observed residuals"


def select_order_d(
    series: TimeSeries,
    max_d: int = 2,
    config: StationarityConfig | None = None,
) -> tuple[int, tuple[StationarityResult, ...]]:
    """Smallest d in ``0..max_d`` for which the differenced series is stationary.

    A constant differenced series has no unit root and ends the search.

    Returns:
        The differencing order and the test results, one per order tried

    Raises:
        EInsufficientData: If a differenced series is too short to test
        ENonConvergent: If no order up to max_d gives a stationary series
    """
    config = config or StationarityConfig()
    results: list[StationarityResult] = []
    for d in range(max_d + 1):
        w = difference(series, d).series
        if np.ptp(w.values) == 0:
            logger.debug("Differencing order %d gives a constant series", d)
            return d, tuple(results)
        result = adf_test(w, config=config)
        results.append(result)
        logger.debug(
            "d=%d: ADF statistic %.4f vs %.4f -> %s",
            d,
            result.statistic,
            result.critical_value,
            result.decision,
        )
        if result.is_stationary:
            return d, tuple(results)
    raise ENonConvergent(
        f"series is not stationary after {max_d} differences",
        context={
            "max_d": max_d,
            "statistics": [r.statistic for r in results],
            "critical_values": [r.critical_value for r in results],
        },
    )


def _roots_outside_unit_circle(poly: np.ndarray) -> bool:
    # poly holds the lag-polynomial coefficients of z^1..z^k
    if poly.shape[0] == 0 or not np.any(poly):
        return True
    roots = np.roots(np.concatenate([poly[::-1], [1.0]]))
    return bool(np.all(np.abs(roots) > 1.0))


@dataclass(frozen=True)
class ArimaModel:
    """Fitted ARIMA(p, d, q) model.

    The differenced series follows
    ``w_t = c + sum(phi_i * w_{t-i}) + e_t + sum(theta_j * e_{t-j})``.

    Attributes:
        order: (p, d, q)
        ar: phi_1..phi_p
        ma: theta_1..theta_q
        intercept: Constant c of the differenced-scale recurrence
        sigma2: Innovation variance (conditional sum of squares / nobs)
        residuals: Innovations on the differenced timestamps; the first p
            entries are missing
        tail: Last d raw values of the source series
        recent: Last p values of the differenced series
        stationarity: Stationarity test results gathered while fitting
        n_iter: MA refinement iterations (0 for pure AR)
        nobs: Number of residuals used in the likelihood
        aic: Akaike criterion from the conditional likelihood
        bic: Bayesian criterion from the conditional likelihood
        last_timestamp: Final source timestamp
        step: Spacing used for forecast timestamps
    """

    order: tuple[int, int, int]
    ar: np.ndarray
    ma: np.ndarray
    intercept: float
    sigma2: float
    residuals: TimeSeries
    tail: np.ndarray
    recent: np.ndarray
    stationarity: tuple[StationarityResult, ...]
    n_iter: int
    nobs: int
    aic: float
    bic: float
    last_timestamp: int | float
    step: int | float
    _fitted: TimeSeries = field(repr=False)

    def __post_init__(self) -> None:
        # Fitted arrays are frozen along with the model
        for name in ("ar", "ma", "tail", "recent"):
            arr = np.array(getattr(self, name), dtype=np.float64, copy=True)
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

    @property
    def mean(self) -> float:
        """Process mean of the differenced series (NaN with a unit AR root)."""
        denom = 1.0 - float(self.ar.sum())
        if abs(denom) < 1e-12:
            return math.nan
        return self.intercept / denom

    @property
    def is_stationary_ar(self) -> bool:
        """True when all roots of ``1 - sum(phi_i z^i)`` lie outside the unit circle."""
        return _roots_outside_unit_circle(-self.ar)

    @property
    def is_invertible_ma(self) -> bool:
        """True when all roots of ``1 + sum(theta_j z^j)`` lie outside the unit circle."""
        return _roots_outside_unit_circle(self.ma)

    def fitted_values(self) -> TimeSeries:
        """In-sample one-step predictions on the original scale."""
        return self._fitted

    def forecast(self, horizon: int, step: int | float | None = None) -> TimeSeries:
        """Forecast ``horizon`` steps past the end of the fitted series.

        The AR and MA recurrence runs on the differenced scale from the
        stored recent values and residuals, then differencing is inverted
        through the stored tail. Innovations after the last observation
        are unknown and taken as zero, so MA terms only contribute to the
        first q steps.

        Args:
            horizon: Number of steps, at least 1
            step: Timestamp spacing (defaults to the fitted series' spacing)

        Raises:
            EInvalidOrder: If horizon is not a positive integer
        """
        if not isinstance(horizon, int) or isinstance(horizon, bool) or horizon < 1:
            raise EInvalidOrder(
                f"forecast horizon must be a positive integer, got {horizon!r}",
                context={"horizon": horizon},
                fix_hint="Request at least one step",
            )
        p, _, q = self.order
        history = list(self.recent)
        innovations = list(self.residuals.present_values()[-q:]) if q else []
        future = np.empty(horizon)
        for k in range(horizon):
            value = self.intercept
            for i in range(1, p + 1):
                value += self.ar[i - 1] * history[-i]
            for j in range(1, q + 1):
                value += self.ma[j - 1] * innovations[-j]
            future[k] = value
            history.append(value)
            innovations.append(0.0)

        levels = integrate(future, self.tail)
        spacing = self.step if step is None else step
        index = self.last_timestamp + spacing * np.arange(1, horizon + 1)
        return TimeSeries(index, levels)

    def forecast_result(self, horizon: int, step: int | float | None = None) -> ForecastResult:
        """Forecast wrapped with the model facts needed to audit it."""
        p, d, q = self.order
        notes = [ZERO_INNOVATION_NOTE]
        if d:
            notes.append(f"differencing of order {d} inverted through the stored tail")
        if not self.is_stationary_ar:
            notes.append("AR polynomial has a root on or inside the unit circle")
        if not self.is_invertible_ma:
            notes.append("MA polynomial is not invertible")
        return ForecastResult(
            forecast=self.forecast(horizon, step=step),
            order=self.order,
            horizon=horizon,
            sigma2=self.sigma2,
            notes=tuple(notes),
        )

    def summary(self) -> dict[str, Any]:
        p, d, q = self.order
        return {
            "model": f"ARIMA({p},{d},{q})",
            "ar": self.ar.tolist(),
            "ma": self.ma.tolist(),
            "intercept": self.intercept,
            "sigma2": self.sigma2,
            "aic": self.aic,
            "bic": self.bic,
            "nobs": self.nobs,
            "n_iter": self.n_iter,
            "stationarity": [r.to_dict() for r in self.stationarity],
        }


class ArimaEstimator:
    """Fits ARIMA models with a fixed configuration.

    Example:
        >>> ts = TimeSeries.from_timestamp(0, 1, [1, 2, 3, 4, 5, 6, 7, 8, 9, 10])
        >>> model = ArimaEstimator(ArimaConfig.auto(p=1)).fit(ts)
        >>> model.order
        (1, 1, 0)
        >>> model.forecast(2).to_pairs()
        [(10, 11.0), (11, 12.0)]
    """

    def __init__(self, config: ArimaConfig | None = None) -> None:
        self.config = config or ArimaConfig()

    def _check_length(self, series: TimeSeries, d: int) -> None:
        cfg = self.config
        needed = 2 * max(cfg.p, cfg.q, 1) + d
        if len(series) < needed:
            raise EInsufficientData(
                f"ARIMA({cfg.p},{d},{cfg.q}) needs at least {needed} values, got {len(series)}",
                context={"length": len(series), "needed": needed},
            )

    def _select_d(self, series: TimeSeries) -> tuple[int, tuple[StationarityResult, ...]]:
        cfg = self.config
        if cfg.d is None:
            return select_order_d(series, cfg.max_d, cfg.stationarity)
        if not cfg.check_stationarity:
            return cfg.d, ()

        w = difference(series, cfg.d).series
        if np.ptp(w.values) == 0:
            return cfg.d, ()
        result = adf_test(w, config=cfg.stationarity)
        if not result.is_stationary:
            raise ENonConvergent(
                f"series is not stationary with d={cfg.d}",
                context={
                    "d": cfg.d,
                    "statistic": result.statistic,
                    "critical_value": result.critical_value,
                },
                fix_hint="Leave d unset to search the differencing order, or increase d",
            )
        return cfg.d, (result,)

    def fit(self, series: TimeSeries) -> ArimaModel:
        """Fit the configured model to a complete series.

        Raises:
            EMalformedInput: If the series has missing values
            EInsufficientData: If the series is too short for the orders
            EDegenerateInput: If a regression is singular
            ENonConvergent: If no stationary differencing order is found,
                a fixed d leaves the series non-stationary, or MA fitting
                does not converge
        """
        cfg = self.config
        if series.has_missing:
            raise EMalformedInput(
                "ARIMA fitting needs a series without missing values",
                context={"missing": series.n_missing},
                fix_hint="Use fill_missing() or drop_missing() first",
            )
        self._check_length(series, cfg.d or 0)
        d, stationarity = self._select_d(series)
        self._check_length(series, d)

        diffed = difference(series, d)
        w = np.array(diffed.series.values, copy=True)
        p, q = cfg.p, cfg.q

        if q == 0:
            ar_fit = fit_ar(w, p, method=cfg.ar_method, include_mean=cfg.include_mean)
            ar, ma = ar_fit.coefficients, np.zeros(0)
            intercept, sigma2, resid = ar_fit.intercept, ar_fit.sigma2, ar_fit.residuals
            n_iter = 0
        else:
            ma_fit = fit_ma(
                w,
                p,
                q,
                include_mean=cfg.include_mean,
                max_iter=cfg.max_iter,
                tol=cfg.tol,
                proxy_order=cfg.proxy_order,
            )
            ar, ma = ma_fit.ar, ma_fit.ma
            intercept, sigma2, resid = ma_fit.intercept, ma_fit.sigma2, ma_fit.residuals
            n_iter = ma_fit.n_iter

        n_w = w.shape[0]
        mask = np.arange(n_w) >= p
        padded = np.zeros(n_w)
        padded[p:] = resid
        residuals = TimeSeries._trusted(diffed.series.index, padded, mask)
        # One-step errors on the differenced scale equal those on the level scale
        fitted = TimeSeries._trusted(
            diffed.series.index, series.values[d:] - padded, mask
        )

        nobs = int(resid.shape[0])
        k = p + q + int(cfg.include_mean) + 1
        if sigma2 > 0:
            loglik = -0.5 * nobs * (math.log(2.0 * math.pi * sigma2) + 1.0)
            aic = -2.0 * loglik + 2.0 * k
            bic = -2.0 * loglik + math.log(nobs) * k
        else:
            aic = bic = -math.inf

        step = series.inferred_step()
        if step is None:
            step = 1
        elif series.index.dtype.kind == "i" and float(step).is_integer():
            step = int(step)

        model = ArimaModel(
            order=(p, d, q),
            ar=ar,
            ma=ma,
            intercept=float(intercept),
            sigma2=float(sigma2),
            residuals=residuals,
            tail=diffed.tail,
            recent=w[n_w - p :] if p else np.zeros(0),
            stationarity=stationarity,
            n_iter=n_iter,
            nobs=nobs,
            aic=aic,
            bic=bic,
            last_timestamp=series.index[-1].item(),
            step=step,
            _fitted=fitted,
        )
        logger.debug(
            "Fitted ARIMA(%d,%d,%d): ar=%s ma=%s sigma2=%.6g",
            p,
            d,
            q,
            np.round(ar, 6),
            np.round(ma, 6),
            sigma2,
        )
        return model


def fit_arima(
    series: TimeSeries,
    order: tuple[int, int | None, int] = (1, None, 0),
    **kwargs: Any,
) -> ArimaModel:
    """Fit ARIMA(p, d, q); ``d=None`` searches the differencing order.

    Extra keyword arguments are passed to ``ArimaConfig``.
    """
    p, d, q = order
    return ArimaEstimator(ArimaConfig(p=p, d=d, q=q, **kwargs)).fit(series)


__all__ = [
    "ArimaEstimator",
    "ArimaModel",
    "ZERO_INNOVATION_NOTE",
    "fit_arima",
    "select_order_d",
]
