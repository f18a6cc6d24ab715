# rfcount/core/cycles.py
from __future__ import annotations

from .damage import CycleCounter
from .residue import ResidueBuffer


def is_closed(a: float, b: float, c: float, d: float) -> bool:
    """
    Four-point test: the inner range B-C lies within the outer range A-D.

                     * D
                    / \\
             B *<--/
              / \\ /
             /   * C
          \\ /
           * A
    """
    return min(b, c) >= min(a, d) and max(b, c) <= max(a, d)


def find_cycles(residue: ResidueBuffer, counter: CycleCounter) -> int:
    """
    Extract closed cycles from the tail of the residue.

    Only the four newest confirmed turning points are examined. Each closure
    counts the inner pair and removes it, then the new tail is tested again.
    Returns the number of removed pairs.
    """
    closed = 0
    while len(residue) >= 4:
        idx = len(residue) - 4
        if not is_closed(
            residue.value(idx),
            residue.value(idx + 1),
            residue.value(idx + 2),
            residue.value(idx + 3),
        ):
            break

        counter.count(residue[idx + 1], residue[idx + 2])
        residue.remove(idx + 1, 2)
        closed += 1
    return closed


def drop_oldest(residue: ResidueBuffer) -> None:
    """Tracking-only mode: keep just the newest confirmed turning point."""
    if len(residue) > 1:
        residue.remove(0, 1)
