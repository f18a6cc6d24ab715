# test/test_exceptions.py
import pytest

from rfcount.core import (
    ErrorCode,
    RainflowError,
    InvalidArgument,
    AllocationFailure,
    InvalidState,
    InvalidLoadSeries,
    ChannelNotFound,
)


def test_exception_inheritance_engine_errors():
    assert issubclass(InvalidArgument, RainflowError)
    assert issubclass(AllocationFailure, RainflowError)
    assert issubclass(InvalidState, RainflowError)
    assert issubclass(InvalidLoadSeries, RainflowError)


def test_engine_errors_behave_like_builtin_errors():
    assert issubclass(InvalidArgument, ValueError)
    assert issubclass(AllocationFailure, MemoryError)
    assert issubclass(InvalidState, RuntimeError)
    assert issubclass(ChannelNotFound, KeyError)


def test_error_codes():
    assert InvalidArgument.code is ErrorCode.INVALID_ARGUMENT
    assert AllocationFailure.code is ErrorCode.ALLOCATION_FAILURE
    assert InvalidState.code is ErrorCode.INVALID_STATE
    assert RainflowError.code is ErrorCode.NONE


def test_lookup_errors_can_be_raised_and_caught_as_keyerror():
    with pytest.raises(KeyError):
        raise ChannelNotFound("load")
