# rfcount/core/series.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

import numpy as np

from .exceptions import InvalidLoadSeries


@dataclass(frozen=True, slots=True)
class LoadSeries:
    """Immutable load history: 1D time vector + 1D sample values."""

    time: np.ndarray = field(repr=False)
    values: np.ndarray = field(repr=False)
    unit: str | None = None
    name: str | None = None
    attrs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        t = np.asarray(self.time)
        v = np.asarray(self.values, dtype=np.float64)

        if t.ndim != 1:
            raise InvalidLoadSeries(f"`time` must be 1D, got shape {t.shape}")
        if v.ndim != 1:
            raise InvalidLoadSeries(f"`values` must be 1D, got shape {v.shape}")
        if t.size != v.size:
            raise InvalidLoadSeries(
                f"`time` and `values` must have same length, got {t.size} vs {v.size}"
            )

        if t.size > 0:
            if not np.isfinite(t).all():
                raise InvalidLoadSeries("`time` contains non-finite values (NaN/Inf).")
            if np.any(np.diff(t) < 0):
                raise InvalidLoadSeries("`time` must be monotonic non-decreasing.")

        if self.attrs is None:
            object.__setattr__(self, "attrs", {})
        elif not isinstance(self.attrs, dict):
            raise InvalidLoadSeries("`attrs` must be a dict.")

        object.__setattr__(self, "time", t)
        object.__setattr__(self, "values", v)

    @classmethod
    def from_values(cls, values, *, dt: float = 1.0, **kwargs: Any) -> "LoadSeries":
        """Series with an equidistant time base starting at 0."""
        v = np.asarray(values, dtype=np.float64)
        if v.ndim != 1:
            raise InvalidLoadSeries(f"`values` must be 1D, got shape {v.shape}")
        return cls(time=np.arange(v.size, dtype=np.float64) * dt, values=v, **kwargs)

    @property
    def n(self) -> int:
        return int(self.values.size)

    @property
    def t_start(self) -> float | None:
        return None if self.n == 0 else float(self.time[0])

    @property
    def t_end(self) -> float | None:
        return None if self.n == 0 else float(self.time[-1])

    def value_range(self) -> tuple[float, float] | None:
        """(min, max) of the finite samples, None if there are none."""
        v = self.values[np.isfinite(self.values)]
        if v.size == 0:
            return None
        return float(v.min()), float(v.max())

    def dropna(self) -> "LoadSeries":
        mask = np.isfinite(self.values)
        if mask.all():
            return self
        return LoadSeries(
            time=self.time[mask],
            values=self.values[mask],
            unit=self.unit,
            name=self.name,
            attrs=self.attrs.copy(),
        )

    def slice_time(self, t_min: float | None = None, t_max: float | None = None) -> "LoadSeries":
        """Samples with t_min <= time <= t_max."""
        if self.n == 0:
            return self

        mask = np.ones_like(self.time, dtype=bool)
        if t_min is not None:
            mask &= self.time >= t_min
        if t_max is not None:
            mask &= self.time <= t_max

        return LoadSeries(
            time=self.time[mask],
            values=self.values[mask],
            unit=self.unit,
            name=self.name,
            attrs=self.attrs.copy(),
        )

    def iter_chunks(self, size: int) -> Iterator[np.ndarray]:
        """Consecutive value chunks of at most `size` samples (views, not copies)."""
        if size < 1:
            raise InvalidLoadSeries(f"Chunk size must be >= 1, got {size}.")
        for start in range(0, self.n, size):
            yield self.values[start : start + size]
