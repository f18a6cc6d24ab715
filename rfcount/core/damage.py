# rfcount/core/damage.py
from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .classes import ClassGrid
from .exceptions import InvalidArgument
from .residue import SampleTuple
from .state import CountFlags

# Weight units: counts are integers, a full cycle weighs two half cycles.
FULL_CYCLE_INCREMENT = 2
HALF_CYCLE_INCREMENT = 1


@dataclass(frozen=True, slots=True)
class WoehlerCurve:
    """
    Pseudo S-N curve used for damage estimation.

    - sd: reference amplitude
    - nd: cycles to failure at `sd`
    - k: slope exponent, stored negative
    """
    sd: float = 1e3
    nd: float = 1e7
    k: float = -5.0

    def __post_init__(self) -> None:
        for name in ("sd", "nd", "k"):
            if not math.isfinite(getattr(self, name)):
                raise InvalidArgument(f"WoehlerCurve.{name} must be finite.")
        if self.sd <= 0.0 or self.nd <= 0.0:
            raise InvalidArgument("WoehlerCurve.sd and nd must be > 0.")
        if self.k == 0.0:
            raise InvalidArgument("WoehlerCurve.k must be non-zero.")

        object.__setattr__(self, "sd", float(self.sd))
        object.__setattr__(self, "nd", float(self.nd))
        object.__setattr__(self, "k", -abs(float(self.k)))

    def damage(self, amplitude: float) -> float:
        """Damage of one full cycle: (Sa / SD) ^ |k| / ND."""
        if amplitude < 0.0:
            raise InvalidArgument(f"Amplitude must be >= 0, got {amplitude}.")
        if amplitude == 0.0:
            return 0.0
        return math.exp(abs(self.k) * (math.log(amplitude) - math.log(self.sd)) - math.log(self.nd))


class CycleCounter:
    """
    Accumulates closed cycles into the rainflow matrix and the pseudo damage.

    The matrix is indexed [from_class, to_class], so rising and falling
    traversals of the same class pair are kept apart.
    """

    def __init__(
        self,
        grid: ClassGrid,
        woehler: WoehlerCurve,
        flags: CountFlags,
        matrix: np.ndarray | None,
    ) -> None:
        self.grid = grid
        self.woehler = woehler
        self.flags = flags
        self.matrix = matrix
        self.damage = 0.0
        self.full_inc = FULL_CYCLE_INCREMENT
        self.half_inc = HALF_CYCLE_INCREMENT
        self.curr_inc = FULL_CYCLE_INCREMENT
        self.cycles = 0

    def amplitude(self, class_from: int, class_to: int) -> float:
        return self.grid.width * abs(class_to - class_from) / 2.0

    def count(self, from_tp: SampleTuple, to_tp: SampleTuple) -> bool:
        """Count the closed cycle from_tp -> to_tp. Returns False for a zero-range cycle."""
        class_from = self.grid.class_index(from_tp.value)
        class_to = self.grid.class_index(to_tp.value)

        if class_from == class_to:
            return False

        if self.flags & CountFlags.COUNT_DAMAGE:
            d = self.woehler.damage(self.amplitude(class_from, class_to))
            self.damage += d / self.full_inc * self.curr_inc

        if self.matrix is not None and self.flags & CountFlags.COUNT_MATRIX:
            self.matrix[class_from, class_to] += self.curr_inc

        self.cycles += 1
        return True
