# rfcount/core/config.py
from __future__ import annotations

import math
from dataclasses import dataclass, field

from .classes import ClassGrid
from .damage import WoehlerCurve
from .exceptions import InvalidArgument
from .state import CountFlags


@dataclass(frozen=True, slots=True)
class RainflowConfig:
    """
    Parameters of one counting session.

    - grid: class discretization (count 0 disables counting)
    - hysteresis: reversals up to this amplitude are ignored
    - flags: count into the matrix, the damage, or both
    - woehler: S-N curve for pseudo damage
    """
    grid: ClassGrid = field(default_factory=ClassGrid)
    hysteresis: float = 0.0
    flags: CountFlags = CountFlags.ALL
    woehler: WoehlerCurve = field(default_factory=WoehlerCurve)

    def __post_init__(self) -> None:
        if not isinstance(self.grid, ClassGrid):
            raise InvalidArgument("RainflowConfig.grid must be a ClassGrid instance.")
        if not isinstance(self.woehler, WoehlerCurve):
            raise InvalidArgument("RainflowConfig.woehler must be a WoehlerCurve instance.")
        if not math.isfinite(self.hysteresis) or self.hysteresis < 0.0:
            raise InvalidArgument(f"RainflowConfig.hysteresis must be >= 0, got {self.hysteresis}.")

        try:
            flags = CountFlags(self.flags)
        except ValueError as e:
            raise InvalidArgument(f"Unknown count flags: {self.flags!r}.") from e

        object.__setattr__(self, "hysteresis", float(self.hysteresis))
        object.__setattr__(self, "flags", flags)

    @classmethod
    def from_range(
        cls,
        x_min: float,
        x_max: float,
        class_count: int,
        *,
        hysteresis: float | None = None,
        flags: CountFlags = CountFlags.ALL,
        woehler: WoehlerCurve | None = None,
    ) -> "RainflowConfig":
        """Build a config whose classes cover [x_min, x_max]; hysteresis defaults to one class width."""
        grid = ClassGrid.from_range(x_min, x_max, class_count)
        return cls(
            grid=grid,
            hysteresis=grid.width if hysteresis is None else hysteresis,
            flags=flags,
            woehler=woehler if woehler is not None else WoehlerCurve(),
        )

    @property
    def class_count(self) -> int:
        return self.grid.count

    @property
    def class_width(self) -> float:
        return self.grid.width

    @property
    def class_offset(self) -> float:
        return self.grid.offset
