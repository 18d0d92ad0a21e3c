"""Feed-forward peak compressor with a shared cross-channel envelope.

One envelope follows the loudest channel of every frame and the resulting
gain is applied to all channels of that frame alike, so compression never
shifts the stereo image.  The envelope carries state from frame to frame,
which makes this stage strictly sequential.
"""

from __future__ import annotations

import logging
import math

import numba
import numpy as np

from .audio import EPSILON, as_buffer, db_to_linear
from .models import CompressorParams

log = logging.getLogger(__name__)


def envelope_coefficient(time_ms: float, sample_rate: int) -> float:
    """One-pole smoothing coefficient for a time constant in milliseconds.

    A non-positive time constant yields 0.0 (the envelope jumps instantly).
    """
    if time_ms <= 0 or sample_rate <= 0:
        return 0.0
    return math.exp(-1.0 / (0.001 * time_ms * sample_rate))


def frame_peaks(buffer, channels: int) -> np.ndarray:
    """Max ``|sample|`` across the channels of each frame.

    A trailing partial frame counts as a (shorter) frame of its own.
    """
    data = as_buffer(buffer)
    if data.size == 0 or channels <= 0:
        return np.zeros(0, dtype=np.float64)
    full = data.size // channels
    peaks = np.zeros(full, dtype=np.float32)
    if full:
        peaks = np.abs(data[:full * channels].reshape(full, channels)).max(axis=1)
    tail = data[full * channels:]
    if tail.size:
        peaks = np.append(peaks, np.abs(tail).max())
    return peaks.astype(np.float64)


@numba.njit
def _envelope_follower(peaks, attack_coeff, release_coeff):
    n = len(peaks)
    env = np.empty(n, dtype=np.float64)
    prev = 0.0
    for i in range(n):
        inp = peaks[i]
        coeff = attack_coeff if inp > prev else release_coeff
        prev = coeff * (prev - inp) + inp
        env[i] = prev
    return env


def follow_envelope(peaks, attack_coeff: float,
                    release_coeff: float) -> np.ndarray:
    """Run the attack/release follower over per-frame peaks, starting from 0."""
    peaks = np.ascontiguousarray(peaks, dtype=np.float64)
    return _envelope_follower(peaks, float(attack_coeff), float(release_coeff))


def gain_reduction_db(env, threshold_db: float, ratio: float) -> np.ndarray:
    """Static gain computer: dB of reduction (always <= 0) for envelope values."""
    env = np.asarray(env, dtype=np.float64)
    ratio = max(float(ratio), 1.0)
    threshold_lin = db_to_linear(threshold_db)
    over = 20.0 * np.log10(np.maximum(env, EPSILON)) - threshold_db
    reduced = over / ratio
    gain_db = np.where(env > threshold_lin, -(over - reduced), 0.0)
    return np.minimum(gain_db, 0.0)


def compressor(buffer, threshold_db: float, ratio: float,
               attack_ms: float, release_ms: float, makeup_db: float,
               sample_rate: int, channels: int) -> np.ndarray:
    """Compress *buffer* and return the result as a new float32 array.

    ``sample_rate <= 0`` or ``channels <= 0`` is not an error: the input
    comes back unchanged.  Ratios below 1 are treated as 1.  The makeup
    gain is applied to every sample whether or not it was compressed.
    """
    data = as_buffer(buffer)
    if sample_rate <= 0 or channels <= 0:
        log.debug("compressor skipped: sample_rate=%s channels=%s",
                  sample_rate, channels)
        return data.copy()
    if data.size == 0:
        return data.copy()

    attack = envelope_coefficient(attack_ms, sample_rate)
    release = envelope_coefficient(release_ms, sample_rate)
    env = follow_envelope(frame_peaks(data, channels), attack, release)

    frame_gain = np.power(10.0, gain_reduction_db(env, threshold_db, ratio) / 20.0)
    frame_gain *= db_to_linear(makeup_db)
    per_sample = np.repeat(frame_gain, channels)[:data.size]
    return (data * per_sample).astype(np.float32)


def compress(buffer, params: CompressorParams, sample_rate: int,
             channels: int) -> np.ndarray:
    return compressor(buffer, params.threshold_db, params.ratio,
                      params.attack_ms, params.release_ms, params.makeup_db,
                      sample_rate, channels)
