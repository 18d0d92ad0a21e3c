"""Peak and RMS level metering over interleaved sample buffers."""

from __future__ import annotations

import numpy as np

from .audio import SILENT_DB, as_buffer, linear_to_db
from .parallel import SEQUENTIAL, ChunkStrategy, map_ranges


def peak_magnitude(buffer, *, strategy: ChunkStrategy = SEQUENTIAL) -> float:
    """Largest absolute sample value (0.0 for an empty buffer)."""
    data = as_buffer(buffer)
    if data.size == 0:
        return 0.0
    partial = map_ranges(
        lambda s, e: float(np.max(np.abs(data[s:e]))), data.size, strategy,
    )
    return max(partial)


def rms_magnitude(buffer, *, strategy: ChunkStrategy = SEQUENTIAL) -> float:
    """Root-mean-square of all samples, accumulated in float64."""
    data = as_buffer(buffer)
    if data.size == 0:
        return 0.0
    partial = map_ranges(
        lambda s, e: float(np.dot(data[s:e].astype(np.float64),
                                  data[s:e].astype(np.float64))),
        data.size, strategy,
    )
    return float(np.sqrt(sum(partial) / data.size))


def compute_peak_level(buffer, *, strategy: ChunkStrategy = SEQUENTIAL) -> float:
    """Peak level in dBFS, or :data:`SILENT_DB` for empty/silent input."""
    return linear_to_db(peak_magnitude(buffer, strategy=strategy))


def compute_rms_level(buffer, *, strategy: ChunkStrategy = SEQUENTIAL) -> float:
    """RMS level in dB, or :data:`SILENT_DB` for empty/silent input."""
    return linear_to_db(rms_magnitude(buffer, strategy=strategy))


def compute_levels(buffer, *, strategy: ChunkStrategy = SEQUENTIAL) -> tuple[float, float]:
    """Return ``(peak_db, rms_db)``."""
    return (compute_peak_level(buffer, strategy=strategy),
            compute_rms_level(buffer, strategy=strategy))


def is_silent(level_db: float) -> bool:
    return level_db == SILENT_DB
