# rfcount/core/result.py
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .classes import ClassGrid
from .damage import FULL_CYCLE_INCREMENT
from .exceptions import ErrorCode
from .residue import SampleTuple
from .state import State


@dataclass(frozen=True, slots=True)
class RainflowResult:
    """Read-only view of a session's results, detached from the engine."""

    state: State
    error: ErrorCode = ErrorCode.NONE
    grid: ClassGrid = field(default_factory=ClassGrid)
    hysteresis: float = 0.0
    damage: float = 0.0
    full_inc: int = FULL_CYCLE_INCREMENT
    sample_count: int = 0
    matrix: np.ndarray | None = field(default=None, repr=False)
    residue: tuple[SampleTuple, ...] = ()
    interim: SampleTuple | None = None

    @property
    def class_count(self) -> int:
        return self.grid.count

    @property
    def cycle_count(self) -> float:
        """Number of closed full cycles held in the matrix."""
        if self.matrix is None:
            return 0.0
        return float(self.matrix.sum()) / self.full_inc

    def cycle_matrix(self) -> np.ndarray | None:
        """Matrix normalized to cycles (weights divided by the full-cycle unit)."""
        if self.matrix is None:
            return None
        return self.matrix / self.full_inc

    def residue_values(self) -> np.ndarray:
        return np.array([tp.value for tp in self.residue], dtype=np.float64)

    def residue_positions(self) -> np.ndarray:
        return np.array([tp.pos for tp in self.residue], dtype=np.int64)

    def peek(self, from_value: float, to_value: float) -> int:
        """Raw matrix weight of the cell addressed by two sample values."""
        if self.matrix is None:
            raise ValueError("No rainflow matrix was counted.")
        return int(self.matrix[self.grid.class_index(from_value), self.grid.class_index(to_value)])
