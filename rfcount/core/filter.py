# rfcount/core/filter.py
from __future__ import annotations

from dataclasses import dataclass

from .residue import ResidueBuffer, SampleTuple


@dataclass(slots=True)
class FilterState:
    """Private turning-point search state of one session."""
    slope: int = 0                        # -1 falling, +1 rising, 0 unset
    minimum: SampleTuple | None = None    # candidate extrema, only used
    maximum: SampleTuple | None = None    # before the first turning point
    started: bool = False

    def reset(self) -> None:
        self.slope = 0
        self.minimum = None
        self.maximum = None
        self.started = False


def _delta(from_value: float, to_value: float) -> tuple[float, int]:
    """Absolute difference and its sign (-1 or +1; zero counts as rising)."""
    d = to_value - from_value
    return abs(d), (-1 if d < 0.0 else 1)


class TurningPointFilter:
    """
    Hysteresis and peak-valley filtering of a sample stream.

    Turning points are written into `residue`: the newest, still movable
    extremum is kept as its interim point and only becomes a confirmed
    turning point once the signal reverses by more than `hysteresis`.
    """

    def __init__(self, residue: ResidueBuffer, hysteresis: float, state: FilterState | None = None) -> None:
        self.residue = residue
        self.hysteresis = hysteresis
        self.state = state if state is not None else FilterState()

    def process(self, tp: SampleTuple) -> SampleTuple | None:
        """Feed one sample; returns the turning point it confirmed, if any."""
        if self.residue.has_interim:
            return self._follow(tp)
        return self._search_first(tp)

    def _search_first(self, tp: SampleTuple) -> SampleTuple | None:
        st = self.state

        if not st.started:
            st.minimum = st.maximum = tp
            st.started = True
            return None

        if tp.value < st.minimum.value:
            falling = True
            st.minimum = tp
        elif tp.value > st.maximum.value:
            falling = False
            st.maximum = tp
        else:
            return None

        delta, _ = _delta(st.minimum.value, st.maximum.value)
        if delta <= self.hysteresis:
            return None

        # Falling: the maximum was the turning point, and vice versa.
        first = st.maximum if falling else st.minimum
        st.slope = -1 if falling else 1
        self.residue.append(first)
        self.residue.set_interim(tp)
        return first

    def _follow(self, tp: SampleTuple) -> SampleTuple | None:
        st = self.state
        interim = self.residue.interim
        delta, slope = _delta(interim.value, tp.value)

        if slope == st.slope:
            # Slope continues, move the interim point along.
            if interim.value != tp.value:
                self.residue.set_interim(tp)
            return None

        if delta <= self.hysteresis:
            # Reversal still inside the hysteresis band.
            return None

        st.slope = slope
        confirmed = self.residue.confirm_interim()
        self.residue.set_interim(tp)
        return confirmed
