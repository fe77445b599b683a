"""Tests for core configuration."""

from __future__ import annotations

import dataclasses

import pytest

from tsanalytics.core.config import ArimaConfig, StationarityConfig
from tsanalytics.core.errors import EInvalidOrder


class TestStationarityConfig:
    """Test stationarity test settings."""

    def test_defaults(self) -> None:
        """Defaults are automatic lags, constant, 5%."""
        cfg = StationarityConfig()
        assert cfg.lags is None
        assert cfg.regression == "c"
        assert cfg.significance == 0.05

    def test_frozen(self) -> None:
        """Config is immutable."""
        cfg = StationarityConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.lags = 3  # type: ignore[misc]

    def test_negative_lags(self) -> None:
        """Negative lags are an invalid order."""
        with pytest.raises(EInvalidOrder):
            StationarityConfig(lags=-1)

    def test_unknown_regression(self) -> None:
        """Regression must be n, c or ct."""
        with pytest.raises(ValueError, match="regression"):
            StationarityConfig(regression="trend")  # type: ignore[arg-type]

    def test_unsupported_significance(self) -> None:
        """Only tabulated levels are allowed."""
        with pytest.raises(ValueError, match="significance"):
            StationarityConfig(significance=0.02)


class TestArimaConfig:
    """Test ARIMA configuration."""

    def test_defaults(self) -> None:
        """Default searches d for an AR(1)."""
        cfg = ArimaConfig()
        assert cfg.order == (1, None, 0)
        assert cfg.max_d == 2
        assert cfg.max_iter == 50
        assert cfg.ar_method == "levinson"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"p": -1},
            {"q": -2},
            {"d": -1},
            {"p": 0, "q": 0},
            {"p": 1.5},
            {"max_d": -1},
            {"proxy_order": 0},
        ],
    )
    def test_invalid_orders(self, kwargs: dict) -> None:
        """Out-of-range orders raise EInvalidOrder."""
        with pytest.raises(EInvalidOrder):
            ArimaConfig(**kwargs)

    def test_bool_is_not_an_order(self) -> None:
        """Booleans are rejected as orders."""
        with pytest.raises(EInvalidOrder):
            ArimaConfig(p=True)  # type: ignore[arg-type]

    def test_invalid_numeric_settings(self) -> None:
        """Iteration cap and tolerance must be positive."""
        with pytest.raises(ValueError):
            ArimaConfig(max_iter=0)
        with pytest.raises(ValueError):
            ArimaConfig(tol=0.0)
        with pytest.raises(ValueError):
            ArimaConfig(ar_method="burg")  # type: ignore[arg-type]

    def test_presets(self) -> None:
        """Preset constructors fill the orders."""
        assert ArimaConfig.ar(2, d=1).order == (2, 1, 0)
        assert ArimaConfig.ma(1).order == (0, None, 1)
        auto = ArimaConfig.auto(p=2, q=1, max_d=1)
        assert auto.order == (2, None, 1)
        assert auto.max_d == 1

    def test_nested_stationarity(self) -> None:
        """Stationarity settings nest inside the ARIMA config."""
        cfg = ArimaConfig(stationarity=StationarityConfig(regression="ct"))
        assert cfg.stationarity.regression == "ct"
