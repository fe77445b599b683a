"""Augmented Dickey-Fuller unit-root test.

Regresses the first difference of a series on its lagged level, optional
lagged differences and deterministic terms, then compares the t-statistic
of the lagged level with MacKinnon (2010) critical values. The result
carries the statistic and critical values so borderline decisions can be
audited.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from tsanalytics.core.config import StationarityConfig
from tsanalytics.core.errors import (
    EDegenerateInput,
    EInsufficientData,
    EMalformedInput,
)
from tsanalytics.series.timeseries import TimeSeries
from tsanalytics.stats.regression import lag_matrix, ols

logger = logging.getLogger(__name__)

# MacKinnon (2010) response surfaces for one variable:
# cv(T) = b0 + b1 / T + b2 / T**2 + b3 / T**3
_MACKINNON_2010: dict[str, dict[str, tuple[float, float, float, float]]] = {
    "n": {
        "1%": (-2.56574, -2.2358, -3.627, 0.0),
        "5%": (-1.94100, -0.2686, -3.365, 31.223),
        "10%": (-1.61682, 0.2656, -2.714, 25.364),
    },
    "c": {
        "1%": (-3.43035, -6.5393, -16.786, -79.433),
        "5%": (-2.86154, -2.8903, -4.234, -40.040),
        "10%": (-2.56677, -1.5384, -2.809, 0.0),
    },
    "ct": {
        "1%": (-3.95877, -9.0531, -28.428, -134.155),
        "5%": (-3.41049, -4.3904, -9.036, -45.374),
        "10%": (-3.12705, -2.5856, -3.925, -22.380),
    },
}

_LEVEL_KEYS = {0.01: "1%", 0.05: "5%", 0.10: "10%"}


def critical_values(regression: str, nobs: int) -> dict[str, float]:
    """Finite-sample critical values for the given deterministic terms."""
    table = _MACKINNON_2010[regression]
    return {
        key: b0 + b1 / nobs + b2 / nobs**2 + b3 / nobs**3
        for key, (b0, b1, b2, b3) in table.items()
    }


def default_lags(n: int) -> int:
    """Lag order ``floor((n - 1) ** (1/3))``, capped to leave degrees of freedom."""
    if n < 4:
        return 0
    return max(0, min(int(math.floor((n - 1) ** (1.0 / 3.0))), (n - 4) // 2))


@dataclass(frozen=True)
class StationarityResult:
    """Outcome of a unit-root test.

    ``is_stationary`` is True when the statistic falls below the critical
    value at ``significance`` (the unit root is rejected).
    """

    statistic: float
    critical_values: dict[str, float]
    significance: float
    is_stationary: bool
    lags: int
    nobs: int
    regression: str
    dropped_lags: int = 0
    notes: tuple[str, ...] = field(default_factory=tuple)

    @property
    def decision(self) -> str:
        return "stationary" if self.is_stationary else "non-stationary"

    @property
    def critical_value(self) -> float:
        return self.critical_values[_LEVEL_KEYS[self.significance]]

    def to_dict(self) -> dict[str, Any]:
        return {
            "statistic": self.statistic,
            "critical_values": dict(self.critical_values),
            "significance": self.significance,
            "decision": self.decision,
            "lags": self.lags,
            "nobs": self.nobs,
            "regression": self.regression,
            "dropped_lags": self.dropped_lags,
            "notes": list(self.notes),
        }


def _design(x: np.ndarray, lags: int, regression: str) -> tuple[np.ndarray, np.ndarray]:
    dx = np.diff(x)
    n = x.shape[0]
    y = dx[lags:]
    columns = [x[lags : n - 1]]
    if lags:
        columns.append(lag_matrix(dx, lags))
    nobs = y.shape[0]
    if regression in ("c", "ct"):
        columns.append(np.ones((nobs, 1)))
    if regression == "ct":
        columns.append(np.arange(1, nobs + 1, dtype=np.float64).reshape(-1, 1))
    X = np.column_stack(columns)
    return y, X


def adf_test(
    series: TimeSeries | np.ndarray,
    lags: int | None = None,
    regression: str = "c",
    significance: float = 0.05,
    config: StationarityConfig | None = None,
) -> StationarityResult:
    """Augmented Dickey-Fuller test for a unit root.

    Args:
        series: Series without missing values (or a plain array)
        lags: Lagged differences in the regression (None: from the length)
        regression: 'n', 'c' or 'ct' deterministic terms
        significance: 0.01, 0.05 or 0.10
        config: StationarityConfig overriding the three settings above

    Returns:
        StationarityResult with statistic, critical values and decision

    Raises:
        EMalformedInput: If the series has missing values
        EInsufficientData: If ``len(series) <= lags + 3`` or the regression
            has no residual degrees of freedom
        EDegenerateInput: If the series is constant or the design is
            singular without lagged differences
    """
    if config is None:
        config = StationarityConfig(lags=lags, regression=regression, significance=significance)  # type: ignore[arg-type]

    if isinstance(series, TimeSeries):
        if series.has_missing:
            raise EMalformedInput(
                "stationarity test needs a series without missing values",
                context={"missing": series.n_missing},
                fix_hint="Use fill_missing() or drop_missing() first",
            )
        x = np.array(series.values, copy=True)
    else:
        x = np.asarray(series, dtype=np.float64)

    n = x.shape[0]
    n_lags = default_lags(n) if config.lags is None else config.lags
    if n <= n_lags + 3:
        raise EInsufficientData(
            f"stationarity test with {n_lags} lags needs more than {n_lags + 3} points",
            context={"length": n, "lags": n_lags},
        )
    if np.ptp(x) == 0:
        raise EDegenerateInput("stationarity test is undefined for a constant series")

    notes: list[str] = []
    dropped = 0
    while True:
        y, X = _design(x, n_lags, config.regression)
        try:
            fit = ols(y, X)
            break
        except EDegenerateInput as exc:
            if n_lags == 0:
                raise EDegenerateInput(
                    "singular unit-root regression",
                    context={**exc.context, "regression": config.regression},
                ) from exc
            logger.warning(
                "Singular ADF design with %d lags (condition %.3g); dropping a lag",
                n_lags,
                exc.context.get("condition_number", float("nan")),
            )
            notes.append(f"dropped lag {n_lags}: singular design")
            n_lags -= 1
            dropped += 1

    gamma = float(fit.coefficients[0])
    se = float(fit.std_errors[0])
    scale = max(float(np.sqrt(np.mean(y * y))), np.finfo(np.float64).tiny)
    level_scale = float(np.max(np.abs(X[:, 0])))
    perfect = math.sqrt(fit.rss / fit.nobs) <= 1e-10 * scale
    if perfect or se == 0:
        if abs(gamma) * level_scale <= 1e-8 * scale:
            statistic = 0.0
            notes.append("perfect fit with no level effect; no evidence against a unit root")
        else:
            statistic = math.copysign(math.inf, gamma)
            notes.append("perfect fit; statistic is unbounded")
    else:
        statistic = gamma / se

    crit = critical_values(config.regression, fit.nobs)
    threshold = crit[_LEVEL_KEYS[config.significance]]
    result = StationarityResult(
        statistic=statistic,
        critical_values=crit,
        significance=config.significance,
        is_stationary=bool(statistic < threshold),
        lags=n_lags,
        nobs=fit.nobs,
        regression=config.regression,
        dropped_lags=dropped,
        notes=tuple(notes),
    )
    logger.debug(
        "ADF statistic=%.4f critical=%.4f lags=%d -> %s",
        statistic,
        threshold,
        n_lags,
        result.decision,
    )
    return result


def is_stationary(series: TimeSeries | np.ndarray, **kwargs: Any) -> bool:
    """Convenience wrapper returning only the decision of ``adf_test``."""
    return adf_test(series, **kwargs).is_stationary


__all__ = [
    "StationarityResult",
    "adf_test",
    "critical_values",
    "default_lags",
    "is_stationary",
]
