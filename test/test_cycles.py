# test/test_cycles.py
import numpy as np

from rfcount.core import (
    ClassGrid,
    CountFlags,
    CycleCounter,
    NumpyAllocator,
    OwnedBuffer,
    SampleTuple,
    WoehlerCurve,
    find_cycles,
    is_closed,
)
from rfcount.core.cycles import drop_oldest


def _residue(values, capacity=16):
    res = OwnedBuffer(capacity, NumpyAllocator())
    for pos, v in enumerate(values, start=1):
        res.append(SampleTuple(value=float(v), cls=0, pos=pos))
    return res


def _counter(count=6):
    grid = ClassGrid(count=count, width=1.0, offset=0.5)
    return CycleCounter(grid, WoehlerCurve(), CountFlags.ALL, np.zeros((count, count), dtype=np.int64))


def test_is_closed_four_point_rule():
    assert is_closed(1, 3, 2, 4)
    assert is_closed(4, 2, 3, 1)
    assert is_closed(1, 4, 1, 4)              # equal bounds close
    assert not is_closed(2, 6, 1, 6)          # inner range exceeds outer minimum
    assert not is_closed(2, 3, 1, 4)


def test_closure_counts_inner_pair_in_traversal_direction():
    res = _residue([1, 3, 2, 4])
    counter = _counter()

    assert find_cycles(res, counter) == 1

    # from 3 (class 2) to 2 (class 1), falling traversal
    assert counter.matrix[2, 1] == counter.full_inc
    assert counter.matrix.sum() == counter.full_inc
    assert [tp.value for tp in res] == [1.0, 4.0]
    assert [tp.pos for tp in res] == [1, 4]


def test_scan_repeats_after_collapse():
    res = _residue([0, 10, 2, 8, 4, 6, 3])
    counter = _counter(count=12)
    # tail 8 4 6 3: inner 4..6 in 3..8 -> closes, leaving 0 10 2 8 3
    # tail 10 2 8 3: inner 2..8 not within 3..10
    assert find_cycles(res, counter) == 1
    assert [tp.value for tp in res] == [0.0, 10.0, 2.0, 8.0, 3.0]

    res = _residue([0, 10, 2, 8, 4, 6, 1])
    # 8 4 6 1 closes (4..6 in 1..8), then 10 2 8 1 closes (2..8 in 1..10)
    assert find_cycles(res, counter) == 2
    assert [tp.value for tp in res] == [0.0, 10.0, 1.0]


def test_open_tail_stops_scan():
    res = _residue([2, 6, 1, 6])
    counter = _counter()
    assert find_cycles(res, counter) == 0
    assert len(res) == 4


def test_fewer_than_four_points_never_close():
    res = _residue([1, 3, 2])
    assert find_cycles(res, _counter()) == 0
    assert len(res) == 3


def test_closure_shifts_interim_point():
    res = _residue([1, 3, 2, 4])
    res.set_interim(SampleTuple(value=0.0, cls=0, pos=5))
    find_cycles(res, _counter())
    assert [tp.value for tp in res] == [1.0, 4.0]
    assert res.interim.pos == 5


def test_drop_oldest_keeps_newest_confirmed_point():
    res = _residue([1, 3])
    res.set_interim(SampleTuple(value=2.0, cls=0, pos=3))
    drop_oldest(res)
    assert [tp.value for tp in res] == [3.0]
    assert res.interim.value == 2.0

    drop_oldest(res)
    assert len(res) == 1
