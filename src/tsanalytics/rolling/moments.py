"""Running moments and extrema for sliding windows.

``RunningMoments`` keeps count, mean and the sum of squared deviations
(M2) with Welford's update, supports removal of a value (for sliding
windows) and merges partial results with Chan's parallel formula.
``MonotonicExtrema`` tracks a window minimum or maximum with a monotonic
deque: O(1) amortized per slide, O(n) over a series.
"""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor

import numpy as np


class RunningMoments:
    """Welford accumulator with push, pop and merge."""

    __slots__ = ("count", "mean", "m2")

    def __init__(self, count: int = 0, mean: float = 0.0, m2: float = 0.0) -> None:
        self.count = count
        self.mean = mean
        self.m2 = m2

    def __repr__(self) -> str:
        return f"RunningMoments(count={self.count}, mean={self.mean}, m2={self.m2})"

    @classmethod
    def from_values(cls, values: Iterable[float]) -> RunningMoments:
        acc = cls()
        for value in values:
            acc.push(value)
        return acc

    @classmethod
    def from_array(cls, values: np.ndarray) -> RunningMoments:
        """Two-pass moments of a block, used as a leaf for merging."""
        arr = np.asarray(values, dtype=np.float64)
        if arr.size == 0:
            return cls()
        mean = float(arr.mean())
        return cls(int(arr.size), mean, float(np.sum((arr - mean) ** 2)))

    def push(self, value: float) -> None:
        self.count += 1
        delta = value - self.mean
        self.mean += delta / self.count
        self.m2 += delta * (value - self.mean)

    def pop(self, value: float) -> None:
        """Remove a value previously pushed."""
        if self.count <= 1:
            self.count, self.mean, self.m2 = 0, 0.0, 0.0
            return
        self.count -= 1
        delta = value - self.mean
        self.mean -= delta / self.count
        self.m2 = max(0.0, self.m2 - delta * (value - self.mean))

    def merge(self, other: RunningMoments) -> RunningMoments:
        """Combine two disjoint accumulators (Chan et al.)."""
        if other.count == 0:
            return RunningMoments(self.count, self.mean, self.m2)
        if self.count == 0:
            return RunningMoments(other.count, other.mean, other.m2)
        n = self.count + other.count
        delta = other.mean - self.mean
        mean = self.mean + delta * other.count / n
        m2 = self.m2 + other.m2 + delta * delta * self.count * other.count / n
        return RunningMoments(n, mean, m2)

    def variance(self, ddof: int = 1) -> float | None:
        """Variance with ``ddof``; 0.0 for a single value, None when empty."""
        if self.count == 0:
            return None
        if self.count == 1:
            return 0.0
        if self.count <= ddof:
            return None
        return self.m2 / (self.count - ddof)

    def std(self, ddof: int = 1) -> float | None:
        var = self.variance(ddof)
        return None if var is None else math.sqrt(var)


class MonotonicExtrema:
    """Sliding-window minimum (or maximum) over positioned values."""

    __slots__ = ("_items", "_better")

    def __init__(self, kind: str = "min") -> None:
        if kind not in ("min", "max"):
            raise ValueError(f"kind must be 'min' or 'max', got {kind!r}")
        self._items: deque[tuple[int, float]] = deque()
        if kind == "min":
            self._better = lambda new, old: new <= old
        else:
            self._better = lambda new, old: new >= old

    def push(self, pos: int, value: float) -> None:
        while self._items and self._better(value, self._items[-1][1]):
            self._items.pop()
        self._items.append((pos, value))

    def expire(self, first_pos: int) -> None:
        """Drop entries positioned before ``first_pos``."""
        while self._items and self._items[0][0] < first_pos:
            self._items.popleft()

    def current(self) -> float | None:
        return self._items[0][1] if self._items else None


def moments_by_chunks(
    values: np.ndarray,
    chunk_size: int,
    max_workers: int | None = None,
) -> RunningMoments:
    """Moments of ``values`` computed per chunk and merged with Chan's formula.

    Chunks are evaluated concurrently when ``max_workers`` allows; the merge
    is done in chunk order, so the result does not depend on scheduling.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    arr = np.asarray(values, dtype=np.float64)
    chunks = [arr[i : i + chunk_size] for i in range(0, arr.size, chunk_size)]

    if len(chunks) <= 1 or max_workers == 1:
        parts = [RunningMoments.from_array(chunk) for chunk in chunks]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            parts = list(executor.map(RunningMoments.from_array, chunks))

    total = RunningMoments()
    for part in parts:
        total = total.merge(part)
    return total


__all__ = ["RunningMoments", "MonotonicExtrema", "moments_by_chunks"]
