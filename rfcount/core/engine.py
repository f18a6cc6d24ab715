# rfcount/core/engine.py
from __future__ import annotations

import logging
from typing import Iterable

import numpy as np

from .classes import ClassGrid
from .config import RainflowConfig
from .cycles import drop_oldest, find_cycles
from .damage import FULL_CYCLE_INCREMENT, CycleCounter, WoehlerCurve
from .exceptions import ErrorCode, InvalidArgument, InvalidState, RainflowError
from .filter import FilterState, TurningPointFilter
from .residue import (
    Allocator,
    MemoryAim,
    NumpyAllocator,
    ResidueBuffer,
    SampleTuple,
    acquire_matrix,
    make_residue,
)
from .result import RainflowResult
from .state import (
    ACTIVE_STATES,
    SUPPORTED_RESIDUAL_METHODS,
    CountFlags,
    ResidualMethod,
    State,
)

logger = logging.getLogger(__name__)


class RainflowEngine:
    """
    Streaming rainflow counter (4-point method) for one load series.

    Lifecycle: initialize() -> feed() any number of times -> finalize() ->
    release(). Samples are logically concatenated across feed() calls, so
    the result does not depend on how the series is chunked.

    Failures raise a RainflowError subclass; the matching ErrorCode is kept
    in `last_error`. InvalidArgument and AllocationFailure move the engine to
    State.ERROR, InvalidState leaves the state untouched. Recover with
    release() followed by initialize().

    An engine is not thread-safe; count independent series with independent
    engines.
    """

    def __init__(self, allocator: Allocator | None = None) -> None:
        if allocator is not None and not isinstance(allocator, Allocator):
            raise InvalidArgument("allocator must implement acquire() and release().")
        self._allocator: Allocator = allocator if allocator is not None else NumpyAllocator()
        self._state = State.UNINITIALIZED
        self._last_error = ErrorCode.NONE
        self._config: RainflowConfig | None = None
        self._filter_state = FilterState()
        self._filter: TurningPointFilter | None = None
        self._residue: ResidueBuffer | None = None
        self._matrix: np.ndarray | None = None
        self._counter: CycleCounter | None = None
        self._pos = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def initialize(
        self,
        class_count: int = 0,
        class_width: float = 1.0,
        class_offset: float = 0.0,
        hysteresis: float = 0.0,
        flags: CountFlags = CountFlags.ALL,
        *,
        woehler: WoehlerCurve | None = None,
    ) -> None:
        """Validate the class parameters and acquire residue and matrix storage."""
        self._require_state({State.UNINITIALIZED}, "initialize")
        try:
            config = RainflowConfig(
                grid=ClassGrid(count=class_count, width=class_width, offset=class_offset),
                hysteresis=hysteresis,
                flags=flags,
                woehler=woehler if woehler is not None else WoehlerCurve(),
            )
        except RainflowError as e:
            raise self._fail(e)
        self._setup(config)

    def initialize_with(self, config: RainflowConfig) -> None:
        """Same as initialize(), from a prepared RainflowConfig."""
        self._require_state({State.UNINITIALIZED}, "initialize")
        if not isinstance(config, RainflowConfig):
            raise self._fail(InvalidArgument("initialize_with() expects a RainflowConfig."))
        self._setup(config)

    def feed(self, samples: Iterable[float]) -> None:
        """
        Process a chunk of samples.

        The chunk is validated as a whole before any sample is processed.
        """
        self._require_state(ACTIVE_STATES, "feed")
        values = self._as_samples(samples)

        grid = self._config.grid
        try:
            for value in values.tolist():
                self._pos += 1
                self._feed_once(SampleTuple(value=value, cls=grid.quantize(value), pos=self._pos))
        except RainflowError as e:
            raise self._fail(e)

    def finalize(self, residual_method: ResidualMethod | int = ResidualMethod.NONE) -> None:
        """
        Stop accepting samples and resolve the pending interim turning point.

        Both supported residual methods leave the remaining residue uncounted.
        """
        self._require_state(ACTIVE_STATES, "finalize")
        try:
            method = ResidualMethod(residual_method)
        except ValueError:
            method = None
        if method not in SUPPORTED_RESIDUAL_METHODS:
            raise self._fail(InvalidArgument(f"Unsupported residual method: {residual_method!r}."))

        self._state = State.FINALIZING
        self._finalize_residue()

        if not self._config.grid.enabled:
            self._residue.clear()

        self._state = State.FINISHED
        logger.debug(
            "Finalized after %d samples: %d cycles, %d residual points.",
            self._pos, self._counter.cycles, len(self._residue),
        )

    def release(self) -> None:
        """Give back acquired storage and return to the uninitialized state."""
        if self._state is State.UNINITIALIZED:
            logger.debug("release() on an uninitialized engine, nothing to do.")
            return

        self._release_storage()
        self._config = None
        self._filter = None
        self._counter = None
        self._filter_state.reset()
        self._pos = 0
        self._last_error = ErrorCode.NONE
        self._state = State.UNINITIALIZED

    def __enter__(self) -> "RainflowEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------
    @property
    def state(self) -> State:
        return self._state

    @property
    def last_error(self) -> ErrorCode:
        return self._last_error

    @property
    def config(self) -> RainflowConfig | None:
        return self._config

    @property
    def damage(self) -> float:
        return 0.0 if self._counter is None else self._counter.damage

    @property
    def full_inc(self) -> int:
        return FULL_CYCLE_INCREMENT if self._counter is None else self._counter.full_inc

    @property
    def matrix(self) -> np.ndarray | None:
        return None if self._matrix is None else self._matrix.copy()

    @property
    def residue(self) -> list[SampleTuple]:
        return [] if self._residue is None else self._residue.to_list()

    @property
    def residue_capacity(self) -> int:
        return 0 if self._residue is None else self._residue.capacity

    @property
    def residue_occupied(self) -> int:
        """Residue slots in use, interim point included."""
        return 0 if self._residue is None else self._residue.occupied

    @property
    def result(self) -> RainflowResult:
        return self.snapshot()

    def snapshot(self) -> RainflowResult:
        """Copy of the current results; stays valid after release()."""
        if self._config is None:
            return RainflowResult(state=self._state, error=self._last_error)
        return RainflowResult(
            state=self._state,
            error=self._last_error,
            grid=self._config.grid,
            hysteresis=self._config.hysteresis,
            damage=self.damage,
            full_inc=self.full_inc,
            sample_count=self._pos,
            matrix=self.matrix,
            residue=tuple(self.residue),
            interim=None if self._residue is None else self._residue.interim,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _setup(self, config: RainflowConfig) -> None:
        grid = config.grid
        try:
            self._residue = make_residue(grid.count, self._allocator)
            if grid.enabled and config.flags & CountFlags.COUNT_MATRIX:
                self._matrix = acquire_matrix(grid.count, self._allocator)
        except RainflowError as e:
            self._release_storage()
            raise self._fail(e)

        self._config = config
        self._filter_state.reset()
        self._filter = TurningPointFilter(self._residue, config.hysteresis, self._filter_state)
        self._counter = CycleCounter(grid, config.woehler, config.flags, self._matrix)
        self._pos = 0
        self._last_error = ErrorCode.NONE
        self._state = State.READY
        logger.debug(
            "Initialized: %d classes, width %g, offset %g, hysteresis %g.",
            grid.count, grid.width, grid.offset, config.hysteresis,
        )

    def _feed_once(self, tp: SampleTuple) -> None:
        confirmed = self._filter.process(tp)

        if self._state is State.READY and self._residue.has_interim:
            self._state = State.ACCUMULATING

        if confirmed is None:
            return
        if self._config.grid.enabled:
            find_cycles(self._residue, self._counter)
        else:
            drop_oldest(self._residue)

    def _finalize_residue(self) -> None:
        if not self._residue.has_interim:
            return
        self._residue.confirm_interim()
        if self._config.grid.enabled:
            find_cycles(self._residue, self._counter)

    def _release_storage(self) -> None:
        if self._residue is not None:
            self._residue.release(self._allocator)
            self._residue = None
        if self._matrix is not None:
            self._allocator.release(self._matrix, MemoryAim.MATRIX)
            self._matrix = None

    def _as_samples(self, samples: Iterable[float]) -> np.ndarray:
        if samples is None:
            raise self._fail(InvalidArgument("feed() expects a sequence of samples, got None."))
        if isinstance(samples, (str, bytes)):
            raise self._fail(InvalidArgument("feed() expects numeric samples, got text."))
        try:
            if not isinstance(samples, np.ndarray):
                samples = list(samples)
            values = np.asarray(samples, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise self._fail(InvalidArgument("Samples must be real numbers.")) from e

        if values.ndim != 1:
            raise self._fail(InvalidArgument(f"Samples must be 1D, got shape {values.shape}."))
        if not np.isfinite(values).all():
            raise self._fail(InvalidArgument("Samples contain non-finite values (NaN/Inf)."))
        return values

    def _require_state(self, allowed: Iterable[State], operation: str) -> None:
        if self._state in allowed:
            return
        self._last_error = ErrorCode.INVALID_STATE
        logger.warning("%s() rejected in state '%s'.", operation, self._state.value)
        raise InvalidState(f"{operation}() is not allowed in state '{self._state.value}'.")

    def _fail(self, error: RainflowError) -> RainflowError:
        """Record `error` on the engine and hand it back for raising."""
        self._last_error = error.code
        self._state = State.ERROR
        logger.warning("Rainflow engine error: %s", error)
        return error


def count_cycles(
    data: Iterable[float],
    class_count: int,
    class_width: float,
    class_offset: float,
    hysteresis: float,
    residual_method: ResidualMethod | int = ResidualMethod.NONE,
    *,
    woehler: WoehlerCurve | None = None,
    allocator: Allocator | None = None,
) -> tuple[float, np.ndarray, np.ndarray | None]:
    """
    Count a complete series in one call.

    Returns
    -------
    damage, residue, matrix
        Pseudo damage, residue values, and the rainflow matrix in cycles
        ([from, to]); the matrix is None when class_count is 0.
    """
    with RainflowEngine(allocator) as engine:
        engine.initialize(class_count, class_width, class_offset, hysteresis, woehler=woehler)
        engine.feed(data)
        engine.finalize(residual_method)
        result = engine.snapshot()
    return result.damage, result.residue_values(), result.cycle_matrix()
