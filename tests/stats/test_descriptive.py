"""Tests for stats/descriptive.py."""

from __future__ import annotations

import numpy as np
import pytest

from tsanalytics.core.errors import EDegenerateInput, EInsufficientData
from tsanalytics.series import TimeSeries
from tsanalytics.stats import (
    correlation,
    covariance,
    describe,
    mean,
    normalize_minmax,
    normalize_zscore,
    std,
    variance,
)


def _series(values: list[float | None]) -> TimeSeries:
    return TimeSeries.from_timestamp(0, 1, values)


class TestMoments:
    """Tests for mean/variance/std."""

    def test_mean_skips_missing(self) -> None:
        """Missing entries are excluded."""
        assert mean(_series([1.0, None, 3.0])) == 2.0

    def test_empty_mean(self) -> None:
        """Mean of an empty series fails."""
        with pytest.raises(EInsufficientData):
            mean(TimeSeries.empty())

    def test_all_missing_mean(self) -> None:
        """Mean of an all-missing series fails."""
        with pytest.raises(EInsufficientData):
            mean(_series([None, None]))

    def test_variance_ddof(self) -> None:
        """Sample and population variance."""
        ts = _series([1.0, 2.0, 3.0, 4.0])
        assert variance(ts) == pytest.approx(np.var([1, 2, 3, 4], ddof=1))
        assert variance(ts, ddof=0) == pytest.approx(1.25)
        assert std(ts) == pytest.approx(np.std([1, 2, 3, 4], ddof=1))

    def test_variance_needs_two(self) -> None:
        """Sample variance of one value fails."""
        with pytest.raises(EInsufficientData):
            variance(_series([1.0]))


class TestPairwise:
    """Tests for covariance and correlation."""

    def test_perfect_negative_correlation(self) -> None:
        """[1,2,3] vs [3,2,1] is exactly -1."""
        r = correlation(_series([1.0, 2.0, 3.0]), _series([3.0, 2.0, 1.0]))
        assert r == pytest.approx(-1.0, abs=1e-12)

    @pytest.mark.parametrize("seed", [0, 5, 9])
    def test_symmetric(self, seed: int) -> None:
        """correlation(a, b) == correlation(b, a)."""
        rng = np.random.default_rng(seed)
        a = _series(rng.normal(size=50).tolist())
        b = _series(rng.normal(size=50).tolist())
        assert correlation(a, b) == correlation(b, a)
        assert covariance(a, b) == pytest.approx(covariance(b, a))

    def test_matches_numpy(self) -> None:
        """Correlation and covariance agree with numpy."""
        rng = np.random.default_rng(2)
        x = rng.normal(size=40)
        y = 0.5 * x + rng.normal(size=40)
        assert correlation(_series(x.tolist()), _series(y.tolist())) == pytest.approx(
            np.corrcoef(x, y)[0, 1]
        )
        assert covariance(_series(x.tolist()), _series(y.tolist())) == pytest.approx(
            np.cov(x, y)[0, 1]
        )

    def test_missing_pairs_excluded(self) -> None:
        """Pairs with a missing side are dropped."""
        a = _series([1.0, 2.0, None, 4.0])
        b = _series([2.0, 4.0, 100.0, 8.0])
        assert correlation(a, b) == pytest.approx(1.0)

    def test_differing_indexes_aligned(self) -> None:
        """Series on different timestamps use the common ones."""
        a = TimeSeries([0, 1, 2, 3], [1.0, 2.0, 3.0, 4.0])
        b = TimeSeries([1, 2, 3, 9], [10.0, 20.0, 30.0, -5.0])
        assert correlation(a, b) == pytest.approx(1.0)

    def test_zero_variance_side(self) -> None:
        """A constant side is degenerate."""
        with pytest.raises(EDegenerateInput):
            correlation(_series([1.0, 2.0, 3.0]), _series([5.0, 5.0, 5.0]))

    def test_too_few_pairs(self) -> None:
        """Fewer than two pairs is insufficient."""
        with pytest.raises(EInsufficientData):
            correlation(_series([1.0, None]), _series([1.0, 2.0]))


class TestNormalize:
    """Tests for normalization."""

    @pytest.mark.parametrize("seed", [1, 4])
    def test_zscore(self, seed: int) -> None:
        """Z-scores have mean 0 and std 1."""
        values = np.random.default_rng(seed).gamma(2.0, 3.0, size=100)
        out = normalize_zscore(_series(values.tolist()))
        assert mean(out) == pytest.approx(0.0, abs=1e-12)
        assert std(out) == pytest.approx(1.0)

    def test_zscore_keeps_missing(self) -> None:
        """Missing entries stay missing."""
        out = normalize_zscore(_series([1.0, None, 3.0]))
        assert out[1] is None
        assert out.present_values().tolist() == pytest.approx([-0.70710678, 0.70710678])

    def test_zscore_constant(self) -> None:
        """Zero variance is degenerate."""
        with pytest.raises(EDegenerateInput):
            normalize_zscore(_series([2.0, 2.0, 2.0]))

    def test_minmax(self) -> None:
        """Min-max maps onto the feature range."""
        out = normalize_minmax(_series([2.0, 4.0, 6.0]))
        assert out.present_values().tolist() == [0.0, 0.5, 1.0]
        out = normalize_minmax(_series([2.0, 4.0, 6.0]), feature_range=(-1.0, 1.0))
        assert out.present_values().tolist() == [-1.0, 0.0, 1.0]

    def test_minmax_constant(self) -> None:
        """Constant series cannot be scaled."""
        with pytest.raises(EDegenerateInput):
            normalize_minmax(_series([1.0, 1.0]))


class TestDescribe:
    """Tests for describe()."""

    def test_summary(self) -> None:
        """Summary fields."""
        info = describe(_series([1.0, None, 3.0, 5.0]))
        assert info["length"] == 4
        assert info["missing"] == 1
        assert info["count"] == 3
        assert info["mean"] == 3.0
        assert info["median"] == 3.0
        assert info["min"] == 1.0 and info["max"] == 5.0

    def test_empty(self) -> None:
        """Describe never raises."""
        info = describe(TimeSeries.empty())
        assert info["count"] == 0
        assert "mean" not in info
