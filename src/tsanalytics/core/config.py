"""Configuration for stationarity testing and ARIMA estimation.

Frozen dataclasses validated on construction, with preset constructors
for the common cases.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from tsanalytics.core.errors import EInvalidOrder

SIGNIFICANCE_LEVELS: tuple[float, ...] = (0.01, 0.05, 0.10)


def _is_order(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


@dataclass(frozen=True)
class StationarityConfig:
    """Settings for the augmented Dickey-Fuller test.

    Args:
        lags: Number of lagged differences (None picks one from the length)
        regression: Deterministic terms - 'n' none, 'c' constant,
            'ct' constant and linear trend
        significance: Test level; one of 0.01, 0.05, 0.10
    """

    lags: int | None = None
    regression: Literal["n", "c", "ct"] = "c"
    significance: float = 0.05

    def __post_init__(self) -> None:
        if self.lags is not None and not _is_order(self.lags):
            raise EInvalidOrder(
                f"lags must be a non-negative integer, got {self.lags!r}",
                context={"lags": self.lags},
            )
        if self.regression not in ("n", "c", "ct"):
            raise ValueError(f"regression must be 'n', 'c' or 'ct', got {self.regression!r}")
        if self.significance not in SIGNIFICANCE_LEVELS:
            raise ValueError(
                f"significance must be one of {SIGNIFICANCE_LEVELS}, got {self.significance}"
            )


@dataclass(frozen=True)
class ArimaConfig:
    """Configuration for ARIMA(p, d, q) estimation.

    Args:
        p: Autoregressive order
        d: Differencing order; None searches 0..max_d with the stationarity test
        q: Moving-average order
        max_d: Upper bound for the differencing search
        ar_method: AR stage solver - Yule-Walker via Levinson-Durbin or OLS
        include_mean: Estimate a mean for the differenced series
        max_iter: Iteration cap for the MA refinement loop
        tol: Relative RSS change treated as converged (and allowed RSS rise)
        proxy_order: Order of the long AR used for innovations (None: automatic)
        check_stationarity: Verify a fixed d with the stationarity test
        stationarity: Settings for the stationarity test
    """

    p: int = 1
    d: int | None = None
    q: int = 0
    max_d: int = 2
    ar_method: Literal["levinson", "ols"] = "levinson"
    include_mean: bool = True
    max_iter: int = 50
    tol: float = 1e-6
    proxy_order: int | None = None
    check_stationarity: bool = True
    stationarity: StationarityConfig = field(default_factory=StationarityConfig)

    def __post_init__(self) -> None:
        context = {"p": self.p, "d": self.d, "q": self.q}
        if not _is_order(self.p) or not _is_order(self.q):
            raise EInvalidOrder("p and q must be non-negative integers", context=context)
        if self.d is not None and not _is_order(self.d):
            raise EInvalidOrder("d must be a non-negative integer or None", context=context)
        if self.p + self.q < 1:
            raise EInvalidOrder("p + q must be at least 1", context=context)
        if not _is_order(self.max_d):
            raise EInvalidOrder("max_d must be a non-negative integer", context={"max_d": self.max_d})
        if self.proxy_order is not None and (not _is_order(self.proxy_order) or self.proxy_order < 1):
            raise EInvalidOrder(
                "proxy_order must be a positive integer",
                context={"proxy_order": self.proxy_order},
            )
        if self.ar_method not in ("levinson", "ols"):
            raise ValueError(f"ar_method must be 'levinson' or 'ols', got {self.ar_method!r}")
        if self.max_iter < 1:
            raise ValueError(f"max_iter must be at least 1, got {self.max_iter}")
        if self.tol <= 0:
            raise ValueError(f"tol must be positive, got {self.tol}")

    @property
    def order(self) -> tuple[int, int | None, int]:
        return (self.p, self.d, self.q)

    @classmethod
    def ar(cls, p: int, d: int | None = None) -> ArimaConfig:
        """Pure autoregressive preset."""
        return cls(p=p, d=d, q=0)

    @classmethod
    def ma(cls, q: int, d: int | None = None) -> ArimaConfig:
        """Pure moving-average preset."""
        return cls(p=0, d=d, q=q)

    @classmethod
    def auto(cls, p: int = 1, q: int = 0, max_d: int = 2) -> ArimaConfig:
        """Search the differencing order, up to max_d."""
        return cls(p=p, d=None, q=q, max_d=max_d)
