# rfcount/core/state.py
from __future__ import annotations

from enum import Enum, IntEnum, IntFlag


class State(Enum):
    """Lifecycle of one counting session."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    ACCUMULATING = "accumulating"
    FINALIZING = "finalizing"
    FINISHED = "finished"
    ERROR = "error"


# States in which samples may be fed and the session finalized.
ACTIVE_STATES = frozenset({State.READY, State.ACCUMULATING})


class CountFlags(IntFlag):
    """What a closed cycle is counted into."""

    NONE = 0
    COUNT_MATRIX = 1
    COUNT_DAMAGE = 2
    ALL = COUNT_MATRIX | COUNT_DAMAGE


class ResidualMethod(IntEnum):
    """
    How the residue is treated at finalize time.

    Only NONE and IGNORE are supported; both discard the unresolved residue.
    The remaining members are accepted by the enum but rejected by
    RainflowEngine.finalize().
    """

    NONE = 0
    IGNORE = 1
    HALFCYCLES = 2
    FULLCYCLES = 3
    REPEATED = 4


SUPPORTED_RESIDUAL_METHODS = frozenset({ResidualMethod.NONE, ResidualMethod.IGNORE})
