"""
Core rainflow counting for rfcount.

This module defines the streaming counting engine (ASTM E1049, 4-point method):
- ClassGrid: discretization of sample values into classes
- TurningPointFilter: hysteresis and peak-valley filtering
- ResidueBuffer: unresolved turning points (inline or allocator-owned)
- find_cycles / CycleCounter: closed-cycle detection and matrix/damage counting
- RainflowEngine: initialize / feed / finalize / release lifecycle

The core layer is independent from I/O and file formats.
"""

from .classes import ClassGrid, MAX_CLASS_COUNT
from .config import RainflowConfig
from .damage import WoehlerCurve, CycleCounter, FULL_CYCLE_INCREMENT, HALF_CYCLE_INCREMENT
from .engine import RainflowEngine, count_cycles
from .filter import FilterState, TurningPointFilter
from .cycles import find_cycles, is_closed
from .residue import (
    Allocator,
    NumpyAllocator,
    MemoryAim,
    SampleTuple,
    ResidueBuffer,
    InlineBuffer,
    OwnedBuffer,
    residue_capacity,
)
from .result import RainflowResult
from .series import LoadSeries
from .state import State, CountFlags, ResidualMethod
from .exceptions import (
    ErrorCode,
    RainflowError,
    InvalidArgument,
    AllocationFailure,
    InvalidState,
    InvalidLoadSeries,
    ChannelNotFound,
)


__all__ = [
    # engine
    "RainflowEngine",
    "RainflowResult",
    "count_cycles",

    # configuration
    "ClassGrid",
    "RainflowConfig",
    "WoehlerCurve",
    "CountFlags",
    "ResidualMethod",
    "State",
    "MAX_CLASS_COUNT",

    # building blocks
    "SampleTuple",
    "FilterState",
    "TurningPointFilter",
    "ResidueBuffer",
    "InlineBuffer",
    "OwnedBuffer",
    "residue_capacity",
    "find_cycles",
    "is_closed",
    "CycleCounter",
    "FULL_CYCLE_INCREMENT",
    "HALF_CYCLE_INCREMENT",

    # memory
    "Allocator",
    "NumpyAllocator",
    "MemoryAim",

    # series
    "LoadSeries",

    # exceptions
    "ErrorCode",
    "RainflowError",
    "InvalidArgument",
    "AllocationFailure",
    "InvalidState",
    "InvalidLoadSeries",
    "ChannelNotFound",
]
