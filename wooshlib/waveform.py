"""Waveform decimation: interleaved samples to per-pixel min/max columns."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from .audio import deinterleave
from .log import dbg, timed
from .parallel import DECIMATE_PARALLEL, ChunkStrategy, map_ranges

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class WaveformColumn:
    min_val: float
    max_val: float


@dataclass(frozen=True)
class WaveformColumns:
    """Min/max envelopes shaped ``(channels, width)``.

    ``channels`` is 1 when the source channels were merged.  Columns with
    no source frames (past the end of the clip) hold ``0.0``.
    """
    mins: np.ndarray = field(repr=False)
    maxs: np.ndarray = field(repr=False)

    @classmethod
    def empty(cls) -> WaveformColumns:
        z = np.zeros((0, 0), dtype=np.float32)
        return cls(z, z)

    @property
    def channels(self) -> int:
        return int(self.mins.shape[0])

    @property
    def width(self) -> int:
        return int(self.mins.shape[1])

    def column(self, channel: int, x: int) -> WaveformColumn:
        return WaveformColumn(float(self.mins[channel, x]),
                              float(self.maxs[channel, x]))


def column_bounds(width: int, scroll_offset: float, zoom: float,
                  frame_count: int) -> tuple[np.ndarray, np.ndarray]:
    """Source frame range ``[starts[x], ends[x])`` for every column.

    Column ``x`` covers ``[scroll + x*spp, scroll + (x+1)*spp)``, floored to
    whole frames and clamped to ``[0, frame_count)``.  ``zoom`` is the
    samples-per-pixel factor and is clamped to at least 1.
    """
    spp = max(float(zoom), 1.0)
    edges = np.floor(float(scroll_offset) + np.arange(width + 1, dtype=np.float64) * spp)
    edges = np.clip(edges, 0, max(frame_count, 0)).astype(np.int64)
    return edges[:-1], edges[1:]


def _reduce_block(frames: np.ndarray, starts: np.ndarray, ends: np.ndarray,
                  mins: np.ndarray, maxs: np.ndarray, c0: int, c1: int) -> None:
    """Fill columns ``[c0, c1)``.  Ranges are contiguous, so one reduceat
    over the covered span yields every non-empty column at once."""
    s, e = starts[c0:c1], ends[c0:c1]
    filled = e > s
    if not filled.any():
        return
    base = int(s[filled][0])
    span = frames[base:int(e[filled][-1])]
    idx = s[filled] - base
    cols = np.nonzero(filled)[0] + c0
    mins[:, cols] = np.minimum.reduceat(span, idx, axis=0).T
    maxs[:, cols] = np.maximum.reduceat(span, idx, axis=0).T


def decimate(buffer, channels: int, frame_count: int, width: int,
             scroll_offset: float = 0, zoom: float = 1.0, *,
             merge_channels: bool = False,
             strategy: ChunkStrategy = DECIMATE_PARALLEL) -> WaveformColumns:
    """Reduce a buffer to one min/max pair per output channel per column.

    Columns are independent; *strategy* decides whether blocks of columns
    run on a thread pool.  Invalid geometry (``channels <= 0`` or
    ``width <= 0``) returns :meth:`WaveformColumns.empty`.
    """
    if channels <= 0 or width <= 0:
        log.debug("decimate skipped: channels=%s width=%s", channels, width)
        return WaveformColumns.empty()

    with timed(f"decimate into {width} columns"):
        frames = deinterleave(buffer, channels)
        frame_count = min(max(int(frame_count), 0), frames.shape[0])
        starts, ends = column_bounds(width, scroll_offset, zoom, frame_count)

        mins = np.zeros((channels, width), dtype=np.float32)
        maxs = np.zeros((channels, width), dtype=np.float32)
        map_ranges(
            lambda c0, c1: _reduce_block(frames, starts, ends, mins, maxs, c0, c1),
            width, strategy,
        )

        if merge_channels:
            filled = ends > starts
            merged_min = np.where(filled, mins.min(axis=0), 0.0)
            merged_max = np.where(filled, maxs.max(axis=0), 0.0)
            mins = merged_min.astype(np.float32)[np.newaxis, :]
            maxs = merged_max.astype(np.float32)[np.newaxis, :]

    return WaveformColumns(mins, maxs)


# ---------------------------------------------------------------------------
# Column cache
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WaveformCacheKey:
    """Everything a decimation result depends on."""
    buffer_id: int
    frame_count: int
    channels: int
    width: int
    scroll_offset: float
    zoom: float
    merge_channels: bool


@dataclass(frozen=True)
class WaveformCache:
    """A decimation result together with the inputs it is valid for.

    The source buffer is referenced so its ``id`` stays unique for as long
    as the cache is alive.
    """
    key: WaveformCacheKey
    columns: WaveformColumns
    source: object = field(repr=False, compare=False, default=None)

    def matches(self, buffer, key: WaveformCacheKey) -> bool:
        return self.source is buffer and self.key == key


def make_cache_key(buffer, channels: int, frame_count: int, width: int,
                   scroll_offset: float = 0, zoom: float = 1.0,
                   merge_channels: bool = False) -> WaveformCacheKey:
    return WaveformCacheKey(
        buffer_id=id(buffer),
        frame_count=int(frame_count),
        channels=int(channels),
        width=int(width),
        scroll_offset=float(scroll_offset),
        zoom=max(float(zoom), 1.0),
        merge_channels=bool(merge_channels),
    )


def ensure_waveform_cache(cache: WaveformCache | None, buffer, channels: int,
                          frame_count: int, width: int,
                          scroll_offset: float = 0, zoom: float = 1.0, *,
                          merge_channels: bool = False,
                          strategy: ChunkStrategy = DECIMATE_PARALLEL) -> WaveformCache:
    """Return *cache* if it was built from the same inputs, else rebuild it."""
    key = make_cache_key(buffer, channels, frame_count, width,
                         scroll_offset, zoom, merge_channels)
    if cache is not None and cache.matches(buffer, key):
        return cache
    dbg(f"waveform cache rebuild: {width} columns, zoom {key.zoom:g}"
        + ("" if cache is None else " (view changed)"))
    columns = decimate(buffer, channels, frame_count, width, scroll_offset, zoom,
                       merge_channels=merge_channels, strategy=strategy)
    return WaveformCache(key=key, columns=columns, source=buffer)
