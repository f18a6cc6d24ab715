# test/test_residue.py
import numpy as np
import pytest

from rfcount.core import (
    AllocationFailure,
    InlineBuffer,
    MemoryAim,
    NumpyAllocator,
    OwnedBuffer,
    SampleTuple,
    residue_capacity,
)
from rfcount.core.residue import acquire_matrix, make_residue


def _tp(value, pos):
    return SampleTuple(value=float(value), cls=0, pos=pos)


class RecordingAllocator(NumpyAllocator):
    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.acquired = []
        self.released = []

    def acquire(self, shape, dtype, aim):
        if aim is self.fail_on:
            return None
        self.acquired.append(aim)
        return super().acquire(shape, dtype, aim)

    def release(self, buffer, aim):
        self.released.append(aim)


def test_capacity_has_fixed_minimum():
    assert residue_capacity(0) == 3
    assert residue_capacity(1) == 3
    assert residue_capacity(2) == 4
    assert residue_capacity(512) == 1024


def test_make_residue_picks_inline_for_small_capacity():
    alloc = RecordingAllocator()
    assert isinstance(make_residue(0, alloc), InlineBuffer)
    assert isinstance(make_residue(1, alloc), InlineBuffer)
    assert alloc.acquired == []

    res = make_residue(6, alloc)
    assert isinstance(res, OwnedBuffer)
    assert res.capacity == 13
    assert alloc.acquired == [MemoryAim.RESIDUE]


def test_owned_buffer_is_released_to_its_allocator():
    alloc = RecordingAllocator()
    res = OwnedBuffer(8, alloc)
    res.release(alloc)
    assert alloc.released == [MemoryAim.RESIDUE]

    inline = InlineBuffer()
    inline.release(alloc)
    assert alloc.released == [MemoryAim.RESIDUE]


def test_owned_buffer_acquisition_failure():
    alloc = RecordingAllocator(fail_on=MemoryAim.RESIDUE)
    with pytest.raises(AllocationFailure):
        OwnedBuffer(8, alloc)


def test_interim_point_is_not_part_of_the_sequence():
    res = InlineBuffer()
    res.append(_tp(1, 1))
    res.set_interim(_tp(3, 2))

    assert len(res) == 1
    assert res.occupied == 2
    assert res.has_interim
    assert res.interim == _tp(3, 2)
    assert res.to_list() == [_tp(1, 1)]

    # replace in place
    res.set_interim(_tp(4, 3))
    assert res.occupied == 2
    assert res.interim.value == 4.0

    confirmed = res.confirm_interim()
    assert confirmed == _tp(4, 3)
    assert len(res) == 2
    assert not res.has_interim
    assert res.interim is None


def test_remove_shifts_following_points_and_interim():
    res = OwnedBuffer(8, NumpyAllocator())
    for pos, v in enumerate([1, 3, 2, 4], start=1):
        res.append(_tp(v, pos))
    res.set_interim(_tp(0, 5))

    res.remove(1, 2)

    assert [tp.value for tp in res] == [1.0, 4.0]
    assert [tp.pos for tp in res] == [1, 4]
    assert res.interim == _tp(0, 5)


def test_negative_index_and_out_of_range():
    res = InlineBuffer()
    res.append(_tp(1, 1))
    res.append(_tp(2, 2))
    assert res[-1].value == 2.0
    with pytest.raises(IndexError):
        _ = res[2]


def test_append_behind_interim_is_rejected():
    res = InlineBuffer()
    res.append(_tp(1, 1))
    res.set_interim(_tp(2, 2))
    with pytest.raises(IndexError):
        res.append(_tp(3, 3))


def test_capacity_overflow_raises_allocation_failure():
    res = InlineBuffer()
    res.append(_tp(1, 1))
    res.append(_tp(2, 2))
    res.set_interim(_tp(3, 3))
    res.confirm_interim()
    with pytest.raises(AllocationFailure):
        res.set_interim(_tp(4, 4))


def test_acquire_matrix_is_zero_filled_square():
    m = acquire_matrix(5, NumpyAllocator())
    assert m.shape == (5, 5)
    assert np.array_equal(m, np.zeros((5, 5)))


def test_owned_residue_has_room_for_interim_beyond_bound():
    # 2n confirmed points plus the interim point, before a closure scan runs
    res = make_residue(4, NumpyAllocator())
    for pos in range(1, residue_capacity(4) + 1):
        res.append(_tp(pos, pos))
    res.set_interim(_tp(0, 9))
    assert res.occupied == residue_capacity(4) + 1

    res.confirm_interim()
    with pytest.raises(AllocationFailure, match="Residue overflow"):
        res.set_interim(_tp(1, 10))
