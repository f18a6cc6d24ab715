# rfcount/core/exceptions.py
from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """Error code retained on an engine after a failed operation."""

    NONE = 0
    INVALID_ARGUMENT = 1
    ALLOCATION_FAILURE = 2
    INVALID_STATE = 3


class RainflowError(Exception):
    """Base error for all rainflow-domain exceptions."""

    code: ErrorCode = ErrorCode.NONE


# ---- Engine errors ----
class InvalidArgument(RainflowError, ValueError):
    """Raised for bad class parameters, samples or residual methods."""

    code = ErrorCode.INVALID_ARGUMENT


class AllocationFailure(RainflowError, MemoryError):
    """Raised when the residue or matrix storage cannot be acquired."""

    code = ErrorCode.ALLOCATION_FAILURE


class InvalidState(RainflowError, RuntimeError):
    """Raised when an operation is invoked outside its legal states."""

    code = ErrorCode.INVALID_STATE


# ---- Ingestion errors ----
class InvalidLoadSeries(RainflowError):
    """Raised when a LoadSeries is constructed with invalid inputs."""


class ChannelNotFound(RainflowError, KeyError):
    """Raised when a requested channel name is not present in a file."""
