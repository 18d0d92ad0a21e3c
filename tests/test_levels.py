"""
Unit tests for wooshlib.levels: peak and RMS metering.
"""

import math

import numpy as np
import pytest

from conftest import make_sine
from wooshlib.audio import SILENT_DB, linear_to_db
from wooshlib.levels import (
    compute_levels,
    compute_peak_level,
    compute_rms_level,
    is_silent,
    peak_magnitude,
)
from wooshlib.parallel import BUFFER_PARALLEL, ChunkStrategy


class TestPeakLevel:

    def test_silence_is_sentinel(self):
        assert compute_peak_level(np.zeros(1000, dtype=np.float32)) == SILENT_DB

    def test_empty_buffer_is_sentinel(self):
        assert compute_peak_level(np.zeros(0, dtype=np.float32)) == SILENT_DB

    def test_full_scale(self):
        peak = compute_peak_level([1.0, -1.0, 0.5, -0.5])
        assert abs(peak) < 0.1

    def test_half_amplitude(self):
        peak = compute_peak_level([0.5, -0.5, 0.25])
        assert -6.5 < peak < -5.5

    def test_single_sample(self):
        peak = compute_peak_level([0.25])
        assert -12.5 < peak < -11.5

    def test_negative_peak_counts(self):
        """The magnitude is used, so a lone negative sample sets the peak."""
        assert compute_peak_level([0.1, -0.8, 0.2]) == pytest.approx(linear_to_db(0.8))

    def test_sine(self):
        peak = compute_peak_level(make_sine(amplitude=0.5))
        assert -6.5 < peak < -5.5

    def test_scaling_shifts_level(self):
        """Scaling by k shifts the peak by 20*log10(k)."""
        buf = make_sine(frames=4800, amplitude=0.3)
        k = 0.25
        shifted = compute_peak_level(buf * k) - compute_peak_level(buf)
        assert shifted == pytest.approx(20 * math.log10(k), abs=1e-3)


class TestRmsLevel:

    def test_silence_is_sentinel(self):
        assert compute_rms_level(np.zeros(1000, dtype=np.float32)) == SILENT_DB

    def test_empty_buffer_is_sentinel(self):
        assert compute_rms_level([]) == SILENT_DB

    def test_dc_signal(self):
        rms = compute_rms_level(np.full(1000, 0.5, dtype=np.float32))
        assert -6.5 < rms < -5.5

    def test_sine(self):
        """Full-scale sine has RMS 1/sqrt(2), about -3 dB."""
        rms = compute_rms_level(make_sine(amplitude=1.0))
        assert -3.5 < rms < -2.5

    def test_rms_never_exceeds_peak(self):
        rng = np.random.default_rng(7)
        for _ in range(20):
            buf = rng.uniform(-1, 1, size=rng.integers(1, 5000)).astype(np.float32)
            peak, rms = compute_levels(buf)
            assert rms <= peak + 1e-6


class TestStrategies:

    def test_parallel_matches_sequential(self):
        buf = make_sine(frames=48000, amplitude=0.7)
        strategy = ChunkStrategy(chunk_size=1000, max_workers=4, min_items=0)
        assert compute_peak_level(buf, strategy=strategy) == compute_peak_level(buf)
        assert compute_rms_level(buf, strategy=strategy) == pytest.approx(
            compute_rms_level(buf), abs=1e-6)

    def test_peak_found_in_last_chunk(self):
        buf = np.full(200_000, 0.1, dtype=np.float32)
        buf[-1] = -0.9
        assert peak_magnitude(buf, strategy=BUFFER_PARALLEL) == pytest.approx(0.9)


def test_is_silent():
    assert is_silent(SILENT_DB)
    assert not is_silent(-120.0)
