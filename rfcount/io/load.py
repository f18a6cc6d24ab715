# rfcount/io/load.py
from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from rfcount.io.mdf_reader import AsammdfLoadReader
from rfcount.core import (
    InvalidLoadSeries,
    LoadSeries,
    RainflowConfig,
    RainflowEngine,
    RainflowResult,
)

logger = logging.getLogger(__name__)

DEFAULT_CLASS_COUNT = 100
DEFAULT_CHUNK_SIZE = 10 * 1024


def _config_for(series: LoadSeries, class_count: int) -> RainflowConfig:
    bounds = series.value_range()
    if bounds is None:
        return RainflowConfig()
    x_min, x_max = bounds
    config = RainflowConfig.from_range(x_min, x_max, class_count)
    logger.info(
        "Derived classes for '%s': %d classes, width %g, offset %g.",
        series.name, config.class_count, config.class_width, config.class_offset,
    )
    return config


def count_load_series(
    series: LoadSeries,
    config: RainflowConfig | None = None,
    *,
    class_count: int = DEFAULT_CLASS_COUNT,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> RainflowResult:
    """
    Stream `series` through a RainflowEngine in chunks of `chunk_size` samples.

    Non-finite samples (gaps in the recording) are dropped. Without a config,
    the classes are derived from the series' value range and the hysteresis
    is set to one class width.
    """
    clean = series.dropna()
    if clean is not series:
        logger.info(
            "Dropped %d non-finite samples from '%s'.", series.n - clean.n, series.name
        )
    series = clean

    if config is None:
        config = _config_for(series, class_count)

    with RainflowEngine() as engine:
        engine.initialize_with(config)
        for chunk in series.iter_chunks(chunk_size):
            engine.feed(chunk)
        engine.finalize()
        return engine.snapshot()


def load_mdf_series(path: str, channel: str) -> LoadSeries:
    with AsammdfLoadReader(path) as reader:
        return reader.read_series(channel)


def count_mdf_channel(
    path: str,
    channel: str,
    config: RainflowConfig | None = None,
    *,
    class_count: int = DEFAULT_CLASS_COUNT,
) -> RainflowResult:
    """
    Rainflow-count one channel of an MDF file.

    With a config, the channel is fed group by group without concatenating
    it in memory; otherwise it is loaded once to derive the class range.
    Non-finite samples are skipped either way.
    """
    if config is None:
        return count_load_series(load_mdf_series(path, channel), class_count=class_count)

    with AsammdfLoadReader(path) as reader, RainflowEngine() as engine:
        info = reader.channel(channel)
        engine.initialize_with(config)
        for _, values in info.iter_segments():
            engine.feed(values[np.isfinite(values)])
        engine.finalize()
        return engine.snapshot()


def load_series_text(path: str) -> LoadSeries:
    """
    Read a long-series text file: one sample per line.

    Lines starting with '*' are ignored.
    """
    p = Path(path)
    try:
        values = np.loadtxt(p, dtype=np.float64, comments="*", ndmin=1)
    except ValueError as e:
        raise InvalidLoadSeries(f"Could not parse samples in '{p}': {e}") from e
    return LoadSeries.from_values(values, name=p.stem, attrs={"source": str(p)})


def count_series_file(
    path: str,
    config: RainflowConfig | None = None,
    *,
    class_count: int = DEFAULT_CLASS_COUNT,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> RainflowResult:
    return count_load_series(
        load_series_text(path), config, class_count=class_count, chunk_size=chunk_size
    )
