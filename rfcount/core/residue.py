# rfcount/core/residue.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

import numpy as np

from .exceptions import AllocationFailure

logger = logging.getLogger(__name__)

# Storage layout of one turning point inside a residue buffer.
TUPLE_DTYPE = np.dtype([("value", "f8"), ("cls", "i8"), ("pos", "i8")])

# Two points define a slope, plus one interim point.
INLINE_CAPACITY = 3


@dataclass(frozen=True, slots=True)
class SampleTuple:
    """One sample: value, class index and 1-based stream position."""
    value: float
    cls: int = 0
    pos: int = 0

    @classmethod
    def from_record(cls, record: np.void) -> "SampleTuple":
        return cls(value=float(record["value"]), cls=int(record["cls"]), pos=int(record["pos"]))

    def as_record(self) -> tuple[float, int, int]:
        return (self.value, self.cls, self.pos)


class MemoryAim(Enum):
    """What a buffer acquired from an Allocator is used for."""

    RESIDUE = "residue"
    MATRIX = "matrix"


@runtime_checkable
class Allocator(Protocol):
    """Acquires and releases the storage owned by a RainflowEngine."""

    def acquire(self, shape: tuple[int, ...], dtype: np.dtype, aim: MemoryAim) -> np.ndarray | None: ...

    def release(self, buffer: np.ndarray, aim: MemoryAim) -> None: ...


class NumpyAllocator:
    """Default allocator: zero-filled numpy arrays, released to the garbage collector."""

    def acquire(self, shape: tuple[int, ...], dtype: np.dtype, aim: MemoryAim) -> np.ndarray | None:
        return np.zeros(shape, dtype=dtype)

    def release(self, buffer: np.ndarray, aim: MemoryAim) -> None:
        return None


def residue_capacity(class_count: int) -> int:
    """Upper bound of the residue after each closure scan: 2n-1 turning points plus the interim point."""
    return max(INLINE_CAPACITY, 2 * class_count)


class ResidueBuffer:
    """
    Ordered turning points not yet resolved into closed cycles.

    Slots [0, len) hold confirmed turning points in chronological order.
    If `has_interim` is set, slot `len` holds the tentative trailing point,
    which is not counted by len() and not visible through indexing.
    """

    def __init__(self, storage: np.ndarray) -> None:
        self._data = storage
        self._count = 0
        self._has_interim = False

    # ---- sequence API ----
    @property
    def capacity(self) -> int:
        return int(self._data.shape[0])

    def __len__(self) -> int:
        return self._count

    def __getitem__(self, index: int) -> SampleTuple:
        if index < 0:
            index += self._count
        if not 0 <= index < self._count:
            raise IndexError(f"residue index {index} out of range ({self._count} points)")
        return SampleTuple.from_record(self._data[index])

    def __iter__(self):
        for i in range(self._count):
            yield SampleTuple.from_record(self._data[i])

    def value(self, index: int) -> float:
        return float(self._data["value"][index])

    def to_list(self) -> list[SampleTuple]:
        return list(self)

    @property
    def occupied(self) -> int:
        """Number of used slots, interim point included."""
        return self._count + (1 if self._has_interim else 0)

    # ---- interim point ----
    @property
    def has_interim(self) -> bool:
        return self._has_interim

    @property
    def interim(self) -> SampleTuple | None:
        if not self._has_interim:
            return None
        return SampleTuple.from_record(self._data[self._count])

    def set_interim(self, tp: SampleTuple) -> None:
        """Put `tp` in the interim slot, replacing any previous interim point."""
        self._check_room(self._count + 1)
        self._data[self._count] = tp.as_record()
        self._has_interim = True

    def confirm_interim(self) -> SampleTuple:
        """Turn the interim point into the newest confirmed turning point."""
        if not self._has_interim:
            raise IndexError("residue has no interim point to confirm")
        self._count += 1
        self._has_interim = False
        return SampleTuple.from_record(self._data[self._count - 1])

    # ---- mutation ----
    def append(self, tp: SampleTuple) -> None:
        """Append a confirmed turning point; only legal while no interim point exists."""
        if self._has_interim:
            raise IndexError("cannot append behind an interim point")
        self._check_room(self._count + 1)
        self._data[self._count] = tp.as_record()
        self._count += 1

    def remove(self, index: int, count: int) -> None:
        """Remove `count` confirmed points starting at `index`; later points shift down."""
        if index < 0 or index + count > self._count:
            raise IndexError(f"cannot remove {count} points at {index} from {self._count}")
        end = self.occupied
        self._data[index : end - count] = self._data[index + count : end]
        self._count -= count

    def clear(self) -> None:
        self._count = 0
        self._has_interim = False

    def _check_room(self, slots: int) -> None:
        # Not a memory failure: turning points that never close, e.g. a
        # converging series inside one class (hysteresis below the class width).
        if slots > self.capacity:
            raise AllocationFailure(
                f"Residue overflow: more than {self.capacity} unresolved turning points. "
                "The hysteresis is probably below the class width."
            )


class InlineBuffer(ResidueBuffer):
    """Small fixed-capacity residue, created without going through an allocator."""

    def __init__(self) -> None:
        super().__init__(np.zeros(INLINE_CAPACITY, dtype=TUPLE_DTYPE))

    def release(self, allocator: Allocator) -> None:
        self.clear()


class OwnedBuffer(ResidueBuffer):
    """Residue whose storage was acquired from an allocator and is released to it."""

    def __init__(self, capacity: int, allocator: Allocator) -> None:
        storage = _acquire(allocator, (capacity,), TUPLE_DTYPE, MemoryAim.RESIDUE)
        super().__init__(storage)

    def release(self, allocator: Allocator) -> None:
        self.clear()
        allocator.release(self._data, MemoryAim.RESIDUE)


def make_residue(class_count: int, allocator: Allocator) -> InlineBuffer | OwnedBuffer:
    """Pick the residue storage variant for a session; fixed until release."""
    capacity = residue_capacity(class_count)
    if capacity <= INLINE_CAPACITY:
        logger.debug("Using inline residue buffer (capacity %d).", INLINE_CAPACITY)
        return InlineBuffer()
    # One spare slot: a confirmed point and the new interim point are both
    # written before the closure scan shrinks the tail.
    logger.debug("Acquiring residue buffer (capacity %d + 1).", capacity)
    return OwnedBuffer(capacity + 1, allocator)


def _acquire(allocator: Allocator, shape: tuple[int, ...], dtype: np.dtype, aim: MemoryAim) -> np.ndarray:
    try:
        buffer = allocator.acquire(shape, np.dtype(dtype), aim)
    except MemoryError as e:
        raise AllocationFailure(f"Could not acquire {aim.value} storage of shape {shape}.") from e

    if buffer is None:
        raise AllocationFailure(f"Allocator returned no {aim.value} storage of shape {shape}.")
    if buffer.shape != shape:
        raise AllocationFailure(
            f"Allocator returned {aim.value} storage of shape {buffer.shape}, expected {shape}."
        )
    return buffer


def acquire_matrix(class_count: int, allocator: Allocator) -> np.ndarray:
    """Acquire a zero-filled class_count x class_count count matrix."""
    matrix = _acquire(allocator, (class_count, class_count), np.dtype(np.int64), MemoryAim.MATRIX)
    matrix[...] = 0
    return matrix
