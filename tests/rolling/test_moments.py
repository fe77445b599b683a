"""Tests for rolling/moments.py."""

from __future__ import annotations

import numpy as np
import pytest

from tsanalytics.rolling import MonotonicExtrema, RunningMoments, moments_by_chunks


class TestRunningMoments:
    """Tests for the Welford accumulator."""

    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    def test_matches_two_pass(self, seed: int) -> None:
        """Welford variance equals the two-pass formula."""
        rng = np.random.default_rng(seed)
        values = rng.normal(1e3, 10.0, size=int(rng.integers(2, 500)))
        acc = RunningMoments.from_values(values)
        assert acc.count == values.size
        assert acc.mean == pytest.approx(values.mean(), rel=1e-12)
        assert acc.variance() == pytest.approx(np.var(values, ddof=1), rel=1e-9)
        assert acc.variance(ddof=0) == pytest.approx(np.var(values), rel=1e-9)

    def test_pop_reverses_push(self) -> None:
        """Removing values restores the earlier moments."""
        acc = RunningMoments.from_values([1.0, 2.0, 3.0, 10.0])
        acc.pop(1.0)
        assert acc.count == 3
        assert acc.mean == pytest.approx(5.0)
        assert acc.variance() == pytest.approx(np.var([2.0, 3.0, 10.0], ddof=1))

    def test_pop_to_empty(self) -> None:
        """Popping the last value resets the accumulator."""
        acc = RunningMoments.from_values([4.0])
        acc.pop(4.0)
        assert acc.count == 0
        assert acc.variance() is None

    def test_small_counts(self) -> None:
        """One value has variance 0; none has no variance."""
        assert RunningMoments().variance() is None
        assert RunningMoments.from_values([5.0]).variance() == 0.0
        assert RunningMoments.from_values([5.0]).std() == 0.0

    def test_merge_matches_concatenation(self) -> None:
        """Chan's merge equals moments of the joined data."""
        rng = np.random.default_rng(11)
        a, b = rng.normal(size=37), rng.normal(5.0, 2.0, size=81)
        merged = RunningMoments.from_values(a).merge(RunningMoments.from_array(b))
        joined = np.concatenate([a, b])
        assert merged.count == joined.size
        assert merged.mean == pytest.approx(joined.mean())
        assert merged.variance() == pytest.approx(np.var(joined, ddof=1), rel=1e-9)

    def test_merge_with_empty(self) -> None:
        """Merging with an empty accumulator is a copy."""
        acc = RunningMoments.from_values([1.0, 3.0])
        merged = acc.merge(RunningMoments())
        assert (merged.count, merged.mean, merged.m2) == (acc.count, acc.mean, acc.m2)
        assert merged is not acc


class TestMomentsByChunks:
    """Tests for chunked computation."""

    @pytest.mark.parametrize(("chunk_size", "workers"), [(7, None), (50, 4), (1000, 2), (3, 1)])
    def test_matches_direct(self, chunk_size: int, workers: int | None) -> None:
        """Chunked moments equal the direct ones."""
        values = np.random.default_rng(3).uniform(-1.0, 1.0, size=301)
        acc = moments_by_chunks(values, chunk_size, max_workers=workers)
        assert acc.count == 301
        assert acc.mean == pytest.approx(values.mean())
        assert acc.variance() == pytest.approx(np.var(values, ddof=1), rel=1e-9)

    def test_invalid_chunk(self) -> None:
        """Chunk size must be positive."""
        with pytest.raises(ValueError):
            moments_by_chunks(np.ones(3), 0)


class TestMonotonicExtrema:
    """Tests for the monotonic deque."""

    def test_min_with_expiry(self) -> None:
        """Expired positions leave the window."""
        ext = MonotonicExtrema("min")
        for pos, value in enumerate([5.0, 2.0, 8.0]):
            ext.push(pos, value)
        assert ext.current() == 2.0
        ext.expire(2)
        assert ext.current() == 8.0

    def test_empty(self) -> None:
        """An empty deque has no extremum."""
        assert MonotonicExtrema("max").current() is None

    def test_bad_kind(self) -> None:
        """Kind must be min or max."""
        with pytest.raises(ValueError):
            MonotonicExtrema("median")
