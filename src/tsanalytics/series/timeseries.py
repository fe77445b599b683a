"""Immutable time-indexed numeric container.

A ``TimeSeries`` is an ordered sequence of (timestamp, value) entries with
strictly increasing numeric timestamps. Each entry is either an observation
or the missing marker ``None``; presence is tracked by a boolean mask, so a
missing entry is never confused with ``0.0`` or ``NaN``.

All arrays are read-only and every transformation returns a new series that
shares no mutable state with its source.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

import numpy as np
import pandas as pd

from tsanalytics.core.errors import EMalformedInput
from tsanalytics.core.types import Pair, Timestamp, Value

A = TypeVar("A")


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


def _to_index(index: Any) -> np.ndarray:
    arr = np.array(index, copy=True)
    if arr.ndim != 1:
        raise EMalformedInput("timestamps must be one-dimensional", context={"ndim": arr.ndim})
    if arr.size == 0:
        return arr.astype(np.float64)
    if arr.dtype.kind in ("i", "u"):
        return arr.astype(np.int64)
    if arr.dtype.kind == "f":
        return arr.astype(np.float64)
    if arr.dtype.kind in ("M", "m"):
        raise EMalformedInput(
            "timestamps must be numeric scalars",
            context={"dtype": str(arr.dtype)},
            fix_hint="Use TimeSeries.from_pandas() to convert a DatetimeIndex",
        )
    try:
        return arr.astype(np.float64)
    except (TypeError, ValueError) as exc:
        raise EMalformedInput(
            "timestamps must be numeric",
            context={"dtype": str(arr.dtype)},
            fix_hint="Use TimeSeries.from_pandas() for datetime indexes",
        ) from exc


def _to_values(values: Any) -> tuple[np.ndarray, np.ndarray]:
    """Split raw values into a float array and a presence mask."""
    if isinstance(values, np.ndarray) and values.dtype.kind in ("i", "u", "f", "b"):
        vals = values.astype(np.float64, copy=True).reshape(-1)
        return vals, np.ones(vals.shape[0], dtype=bool)

    raw = list(values)
    present = np.fromiter((v is not None for v in raw), dtype=bool, count=len(raw))
    try:
        vals = np.array([np.nan if v is None else v for v in raw], dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise EMalformedInput("values must be numeric or None") from exc
    return vals.reshape(-1), present


@dataclass(frozen=True, eq=False)
class TimeSeries:
    """Ordered (timestamp, value) entries with a presence mask.

    Args:
        index: Strictly increasing, finite numeric timestamps
        values: Finite numbers, or None for a missing entry
        mask: Optional explicit presence mask (True = observed); when given,
            the values at masked-out positions are ignored

    Raises:
        EMalformedInput: If timestamps are not strictly increasing, any
            timestamp or present value is non-finite, or lengths differ

    Example:
        >>> ts = TimeSeries([0, 1, 2], [1.0, None, 3.0])
        >>> len(ts), ts[1], ts.n_missing
        (3, None, 1)
    """

    index: np.ndarray
    values: np.ndarray
    mask: np.ndarray | None = None

    def __post_init__(self) -> None:
        index = _to_index(self.index)
        values, present = _to_values(self.values)
        if self.mask is not None:
            present = np.array(self.mask, dtype=bool, copy=True).reshape(-1)

        if index.shape[0] != values.shape[0] or values.shape[0] != present.shape[0]:
            raise EMalformedInput(
                "timestamps, values and mask must have the same length",
                context={
                    "n_index": int(index.shape[0]),
                    "n_values": int(values.shape[0]),
                    "n_mask": int(present.shape[0]),
                },
            )
        if index.dtype.kind == "f" and not np.all(np.isfinite(index)):
            raise EMalformedInput("timestamps must be finite")
        if index.shape[0] > 1:
            steps = np.diff(index)
            bad = np.flatnonzero(steps <= 0)
            if bad.size:
                pos = int(bad[0]) + 1
                raise EMalformedInput(
                    "timestamps must be strictly increasing",
                    context={"position": pos, "timestamp": index[pos].item()},
                )
        if not np.all(np.isfinite(values[present])):
            pos = int(np.flatnonzero(present & ~np.isfinite(values))[0])
            raise EMalformedInput(
                "values must be finite; use None for a missing entry",
                context={"position": pos, "timestamp": index[pos].item()},
            )

        values[~present] = np.nan
        object.__setattr__(self, "index", _readonly(index))
        object.__setattr__(self, "values", _readonly(values))
        object.__setattr__(self, "mask", _readonly(present))

    @classmethod
    def _trusted(cls, index: np.ndarray, values: np.ndarray, mask: np.ndarray) -> TimeSeries:
        """Build from arrays already known to satisfy the invariants."""
        obj = object.__new__(cls)
        object.__setattr__(obj, "index", _readonly(np.array(index, copy=True)))
        vals = np.array(values, dtype=np.float64, copy=True)
        present = np.array(mask, dtype=bool, copy=True)
        vals[~present] = np.nan
        object.__setattr__(obj, "values", _readonly(vals))
        object.__setattr__(obj, "mask", _readonly(present))
        return obj

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls) -> TimeSeries:
        return cls(np.array([], dtype=np.float64), np.array([], dtype=np.float64))

    @classmethod
    def from_pairs(cls, pairs: Iterable[Pair]) -> TimeSeries:
        """Build from (timestamp, value) pairs in insertion order."""
        items = list(pairs)
        if not items:
            return cls.empty()
        timestamps = [t for t, _ in items]
        values = [v for _, v in items]
        return cls(timestamps, values)

    @classmethod
    def from_timestamp(
        cls,
        start: Timestamp,
        resolution: Timestamp,
        values: Sequence[Value] | np.ndarray,
    ) -> TimeSeries:
        """Build a regular series starting at ``start`` spaced by ``resolution``.

        Example:
            >>> TimeSeries.from_timestamp(0, 60, [1.0, 2.5, 3.2]).index.tolist()
            [0, 60, 120]
        """
        if not resolution > 0:
            raise EMalformedInput(
                "resolution must be positive", context={"resolution": resolution}
            )
        n = len(values)
        index = start + np.arange(n) * resolution
        return cls(index, values)

    @classmethod
    def from_pandas(cls, series: pd.Series, unit: str = "ms") -> TimeSeries:
        """Build from a pandas Series.

        NaN entries become missing markers. A DatetimeIndex is converted to
        integer epoch offsets in ``unit`` ('s', 'ms', 'us' or 'ns').
        """
        idx = series.index
        if isinstance(idx, pd.DatetimeIndex):
            index = idx.as_unit(unit).asi8.copy()
        else:
            index = np.asarray(idx)
        raw = series.to_numpy(dtype=np.float64, na_value=np.nan)
        mask = ~np.isnan(raw)
        return cls(index, raw, mask=mask)

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        ds_col: str = "ds",
        y_col: str = "y",
        unit: str = "ms",
    ) -> TimeSeries:
        """Build from a DataFrame with timestamp and value columns."""
        missing = {ds_col, y_col} - set(df.columns)
        if missing:
            raise EMalformedInput(
                f"Missing required columns: {sorted(missing)}",
                context={"columns": list(df.columns)},
            )
        series = pd.Series(df[y_col].to_numpy(), index=pd.Index(df[ds_col]))
        return cls.from_pandas(series, unit=unit)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return int(self.index.shape[0])

    def __iter__(self) -> Iterator[tuple[Timestamp, Value]]:
        return self.items()

    def __getitem__(self, pos: int) -> Value:
        n = len(self)
        if not -n <= pos < n:
            raise IndexError(f"position {pos} out of range for series of length {n}")
        return self._value_at(pos)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeSeries):
            return NotImplemented
        return (
            len(self) == len(other)
            and bool(np.array_equal(self.index, other.index))
            and bool(np.array_equal(self.mask, other.mask))
            and bool(np.array_equal(self.values[self.mask], other.values[other.mask]))
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if not len(self):
            return "TimeSeries(n=0)"
        return (
            f"TimeSeries(n={len(self)}, start={self.start}, end={self.end}, "
            f"missing={self.n_missing})"
        )

    def _value_at(self, pos: int) -> Value:
        return float(self.values[pos]) if self.mask[pos] else None

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    @property
    def start(self) -> Timestamp | None:
        return self.index[0].item() if len(self) else None

    @property
    def end(self) -> Timestamp | None:
        return self.index[-1].item() if len(self) else None

    @property
    def n_missing(self) -> int:
        return int(np.count_nonzero(~self.mask))

    @property
    def n_present(self) -> int:
        return int(np.count_nonzero(self.mask))

    @property
    def has_missing(self) -> bool:
        return self.n_missing > 0

    def nth(self, pos: int, default: Value = None) -> Value:
        """Return the value at position ``pos``, or ``default`` when out of range."""
        if 0 <= pos < len(self):
            return self._value_at(pos)
        return default

    def at(self, timestamp: Timestamp) -> Value:
        """Return the value in force at ``timestamp``.

        That is the entry at or most recently before ``timestamp``; None
        before the first entry or when that entry is missing.
        """
        pos = int(np.searchsorted(self.index, timestamp, side="right")) - 1
        if pos < 0:
            return None
        return self._value_at(pos)

    def present_values(self) -> np.ndarray:
        """Observed values only, in order."""
        return self.values[self.mask]

    def present_index(self) -> np.ndarray:
        """Timestamps of observed entries only."""
        return self.index[self.mask]

    def inferred_step(self) -> float | None:
        """Median spacing between consecutive timestamps (None if fewer than 2)."""
        if len(self) < 2:
            return None
        return float(np.median(np.diff(self.index)))

    def items(self) -> Iterator[tuple[Timestamp, Value]]:
        """Iterate over raw (timestamp, value) pairs in insertion order."""
        for pos in range(len(self)):
            yield self.index[pos].item(), self._value_at(pos)

    def to_pairs(self) -> list[tuple[Timestamp, Value]]:
        return list(self.items())

    # ------------------------------------------------------------------
    # Transformations
    # ------------------------------------------------------------------

    def _take(self, indexer: slice | np.ndarray) -> TimeSeries:
        return TimeSeries._trusted(self.index[indexer], self.values[indexer], self.mask[indexer])

    def slice(self, start: Timestamp | None = None, end: Timestamp | None = None) -> TimeSeries:
        """Entries with ``start <= t < end``; empty (never an error) without overlap."""
        lo = 0 if start is None else int(np.searchsorted(self.index, start, side="left"))
        hi = len(self) if end is None else int(np.searchsorted(self.index, end, side="left"))
        if hi <= lo:
            return self._take(slice(0, 0))
        return self._take(slice(lo, hi))

    def head(self, n: int = 5) -> TimeSeries:
        return self._take(slice(0, max(n, 0)))

    def tail(self, n: int = 5) -> TimeSeries:
        if n <= 0:
            return self._take(slice(0, 0))
        return self._take(slice(max(len(self) - n, 0), len(self)))

    def drop_missing(self) -> TimeSeries:
        return self._take(self.mask.copy())

    def with_values(self, values: Sequence[Value] | np.ndarray) -> TimeSeries:
        """Same timestamps, new values (validated)."""
        return TimeSeries(self.index, values)

    def map_values(self, func: Callable[[float], Value]) -> TimeSeries:
        """Apply ``func`` to every observed value; missing entries stay missing.

        ``func`` may return None to mark an entry missing.
        """
        out: list[Value] = [
            func(float(v)) if present else None
            for v, present in zip(self.values, self.mask, strict=True)
        ]
        return TimeSeries(self.index, out)

    def map(self, func: Callable[[Timestamp, float], Value]) -> TimeSeries:
        """Apply ``func(timestamp, value)`` to every observed entry."""
        out: list[Value] = [
            func(t, v) if v is not None else None for t, v in self.items()
        ]
        return TimeSeries(self.index, out)

    def filter(self, predicate: Callable[[Timestamp, float], bool]) -> TimeSeries:
        """Observed entries for which ``predicate(timestamp, value)`` holds.

        Missing entries never satisfy a predicate and are dropped.
        """
        keep = np.fromiter(
            (v is not None and bool(predicate(t, v)) for t, v in self.items()),
            dtype=bool,
            count=len(self),
        )
        return self._take(keep)

    def fold(self, func: Callable[[A, float], A], initial: A) -> A:
        """Left fold of ``func`` over the observed values."""
        acc = initial
        for value in self.present_values():
            acc = func(acc, float(value))
        return acc

    # ------------------------------------------------------------------
    # Interop
    # ------------------------------------------------------------------

    def to_pandas(self, unit: str | None = None, name: str = "y") -> pd.Series:
        """Return a pandas Series; missing entries become NaN.

        With ``unit`` set, integer timestamps are converted to a DatetimeIndex.
        """
        if unit is not None:
            idx: pd.Index = pd.to_datetime(self.index, unit=unit)
        else:
            idx = pd.Index(self.index)
        return pd.Series(np.array(self.values, copy=True), index=idx, name=name)

    def to_frame(self, unit: str | None = None) -> pd.DataFrame:
        """Return a DataFrame with ``ds`` and ``y`` columns."""
        s = self.to_pandas(unit=unit)
        return pd.DataFrame({"ds": s.index, "y": s.to_numpy()})

    def allclose(self, other: TimeSeries, rtol: float = 1e-9, atol: float = 1e-12) -> bool:
        """Compare with another series using a floating-point tolerance."""
        if len(self) != len(other) or not np.array_equal(self.mask, other.mask):
            return False
        if not np.allclose(self.index, other.index, rtol=rtol, atol=atol):
            return False
        return bool(
            np.allclose(
                self.values[self.mask], other.values[other.mask], rtol=rtol, atol=atol
            )
        )


__all__ = ["TimeSeries"]
