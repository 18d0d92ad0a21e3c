from __future__ import annotations

import logging
import math

import numpy as np

from .audio import as_buffer, db_to_linear, linear_to_db
from .levels import is_silent, peak_magnitude, rms_magnitude
from .parallel import SEQUENTIAL, ChunkStrategy, map_ranges

log = logging.getLogger(__name__)


def apply_gain(buffer, gain_db: float, *,
               strategy: ChunkStrategy = SEQUENTIAL) -> np.ndarray:
    """Return a new buffer scaled by *gain_db*.

    The input is never modified.  Chunks are written into disjoint slices
    of the output, so the parallel path needs no locking.  The product is
    formed in float64, so gains past the float32 range still land on a
    finite result.
    """
    data = as_buffer(buffer)
    out = np.empty_like(data)
    gain = np.float64(db_to_linear(float(gain_db)))

    def _scale(start: int, end: int) -> None:
        np.multiply(data[start:end], gain, out=out[start:end], casting="same_kind")

    map_ranges(_scale, data.size, strategy)
    return out


def _normalize(buffer, target_db: float, measure, label: str,
               strategy: ChunkStrategy) -> np.ndarray:
    data = as_buffer(buffer)
    if data.size == 0:
        return data.copy()
    magnitude = measure(data, strategy=strategy)
    if is_silent(linear_to_db(magnitude)):
        log.debug("%s normalize skipped: buffer is silent", label)
        return data.copy()
    # measured without the level floor: magnitudes under EPSILON still get
    # the full gain to the target
    current = 20.0 * math.log10(magnitude)
    gain_db = float(target_db) - current
    log.debug("%s normalize: %.2f dB -> %.2f dB (gain %+.2f dB)",
              label, current, target_db, gain_db)
    return apply_gain(data, gain_db, strategy=strategy)


def normalize_to_peak(buffer, target_dbfs: float, *,
                      strategy: ChunkStrategy = SEQUENTIAL) -> np.ndarray:
    """Scale so the peak lands on *target_dbfs*.  Silent input is returned as-is."""
    return _normalize(buffer, target_dbfs, peak_magnitude, "peak", strategy)


def normalize_to_rms(buffer, target_db: float, *,
                     strategy: ChunkStrategy = SEQUENTIAL) -> np.ndarray:
    """Scale so the RMS level lands on *target_db*.  Silent input is returned as-is."""
    return _normalize(buffer, target_db, rms_magnitude, "rms", strategy)
