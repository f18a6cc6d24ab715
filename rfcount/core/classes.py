# rfcount/core/classes.py
from __future__ import annotations

import math
from dataclasses import dataclass

from .exceptions import InvalidArgument

MAX_CLASS_COUNT = 512


@dataclass(frozen=True, slots=True)
class ClassGrid:
    """
    Equal-width classes used to discretize sample values.

    - count: number of classes (0 disables discretized counting)
    - width: width of one class, must be > 0 when count > 0
    - offset: lower bound of class 0
    """
    count: int = 0
    width: float = 1.0
    offset: float = 0.0

    def __post_init__(self) -> None:
        if isinstance(self.count, bool) or not isinstance(self.count, int):
            raise InvalidArgument("ClassGrid.count must be an integer.")
        if not 0 <= self.count <= MAX_CLASS_COUNT:
            raise InvalidArgument(
                f"ClassGrid.count must be in [0, {MAX_CLASS_COUNT}], got {self.count}."
            )
        if not math.isfinite(self.width) or not math.isfinite(self.offset):
            raise InvalidArgument("ClassGrid.width and offset must be finite.")
        if self.count > 0 and self.width <= 0.0:
            raise InvalidArgument(f"ClassGrid.width must be > 0, got {self.width}.")

        object.__setattr__(self, "width", float(self.width))
        object.__setattr__(self, "offset", float(self.offset))

    @classmethod
    def from_range(cls, x_min: float, x_max: float, count: int) -> "ClassGrid":
        """
        Derive width and offset so that [x_min, x_max] is centred in `count` classes.

        The width is rounded up to 1/100 and the offset down to 1/1000, so that
        x_min and x_max fall inside the first and last class.
        """
        if x_max < x_min:
            raise InvalidArgument(f"x_max ({x_max}) must be >= x_min ({x_min}).")

        if count < 1:
            return cls(count=0, width=1.0, offset=0.0)

        width = (x_max - x_min) / (count - 1) if count > 1 else 0.0
        width = math.ceil(width * 100) / 100
        offset = math.floor((x_min - width / 2) * 1000) / 1000
        return cls(count=count, width=width, offset=offset)

    @property
    def enabled(self) -> bool:
        return self.count > 0

    def quantize(self, value: float) -> int:
        """Raw class index of `value`; may lie outside [0, count - 1]."""
        if not self.enabled:
            return 0
        return math.floor((value - self.offset) / self.width)

    def clamp(self, index: int) -> int:
        if index < 0:
            return 0
        if index >= self.count:
            return self.count - 1
        return index

    def class_index(self, value: float) -> int:
        """Class of `value` as used to address the rainflow matrix."""
        return self.clamp(self.quantize(value))

    def class_mean(self, index: int) -> float:
        return self.width * (0.5 + index) + self.offset

    def class_upper(self, index: int) -> float:
        return self.width * (1.0 + index) + self.offset
