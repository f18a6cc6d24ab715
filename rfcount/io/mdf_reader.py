from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Protocol

from asammdf import MDF  # pivotal dependency for MDF file handling
import numpy as np

from rfcount.core import ChannelNotFound, InvalidLoadSeries, LoadSeries

logger = logging.getLogger(__name__)


@dataclass
class RawSegmentInfo:
    """
    One occurrence of a channel inside an MDF file (one data group).

    A load channel recorded over several measurements appears once per
    group; each occurrence is loaded on its own, so long recordings can be
    streamed group by group.
    """

    channel_name: str
    group_index: int           # group id inside the MDF
    channel_index: int         # channel id inside the group

    # Lazy loader: when called, reads ONLY this segment -> (time, values)
    loader: Callable[[], tuple[np.ndarray, np.ndarray]] = field(repr=False)


@dataclass
class RawChannelInfo:
    """Logical channel view spanning all groups that contain the channel."""

    name: str
    segments: list[RawSegmentInfo]
    unit: str | None = None

    def iter_segments(self) -> Iterator[tuple[np.ndarray, np.ndarray]]:
        """Yield (time, values) per segment, in group order."""
        for seg in self.segments:
            yield seg.loader()

    def load(self) -> tuple[np.ndarray, np.ndarray]:
        """Load all segments and concatenate them."""
        times: list[np.ndarray] = []
        values: list[np.ndarray] = []
        for t, v in self.iter_segments():
            times.append(t)
            values.append(v)

        if not times:
            empty = np.array([], dtype=np.float64)
            return empty, empty
        return np.concatenate(times), np.concatenate(values)


class LoadReader(Protocol):
    """Protocol for readers that expose load channels of a measurement file."""

    def list_channels(self) -> List[RawChannelInfo]:
        ...

    def read_series(self, name: str) -> LoadSeries:
        ...


class AsammdfLoadReader:
    """Concrete LoadReader using asammdf.MDF; master (time) channels are skipped."""

    def __init__(self, path: str):
        self._path = str(path)
        self._mdf = MDF(self._path)
        self._channels: dict[str, RawChannelInfo] = {}
        self._build_index()

    def __enter__(self) -> "AsammdfLoadReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._mdf.close()

    # ------------------------------------------------------------------
    # Index construction
    # ------------------------------------------------------------------
    def _build_index(self) -> None:
        masters = self._mdf.masters_db

        for name, occurrences in self._mdf.channels_db.items():
            segments: list[RawSegmentInfo] = []
            for group_index, channel_index in sorted(occurrences):
                if masters.get(group_index) == channel_index:
                    continue
                segments.append(
                    RawSegmentInfo(
                        channel_name=name,
                        group_index=group_index,
                        channel_index=channel_index,
                        loader=self._make_loader(name, group_index, channel_index),
                    )
                )
            if segments:
                self._channels[name] = RawChannelInfo(name=name, segments=segments)

        logger.debug("Indexed %d channels in %s.", len(self._channels), self._path)

    def _make_loader(self, name: str, g_i: int, c_i: int) -> Callable[[], tuple[np.ndarray, np.ndarray]]:
        def _loader() -> tuple[np.ndarray, np.ndarray]:
            sig = self._mdf.get(group=g_i, index=c_i)
            try:
                v = np.asarray(sig.samples, dtype=np.float64)
            except (TypeError, ValueError) as e:
                raise InvalidLoadSeries(f"Channel '{name}' does not hold numeric samples.") from e
            info = self._channels.get(name)
            if info is not None and info.unit is None and sig.unit:
                info.unit = sig.unit
            return np.asarray(sig.timestamps, dtype=np.float64), v

        return _loader

    # ------------------------------------------------------------------
    # LoadReader protocol implementation
    # ------------------------------------------------------------------
    def list_channels(self) -> List[RawChannelInfo]:
        return list(self._channels.values())

    def channel(self, name: str) -> RawChannelInfo:
        try:
            return self._channels[name]
        except KeyError as e:
            raise ChannelNotFound(name) from e

    def read_series(self, name: str) -> LoadSeries:
        """Read a whole channel (all groups concatenated) as a LoadSeries."""
        info = self.channel(name)
        t, v = info.load()
        return LoadSeries(
            time=t,
            values=v,
            unit=info.unit,
            name=name,
            attrs={"source": f"MDF:{self._path}", "groups": [s.group_index for s in info.segments]},
        )
