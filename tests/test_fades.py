"""
Unit tests for wooshlib.fades: gain curves and fade-in / fade-out.
"""

import numpy as np
import pytest

from wooshlib.fades import apply_fade, apply_fade_in, apply_fade_out, fade_gain
from wooshlib.models import FadeCurve, FadeDirection, FadeParams


def ones(n):
    return np.ones(n, dtype=np.float32)


class TestFadeGain:

    @pytest.mark.parametrize("curve", list(FadeCurve))
    def test_endpoints(self, curve):
        assert fade_gain(0.0, curve) == 0.0
        assert fade_gain(1.0, curve) == 1.0

    @pytest.mark.parametrize("curve", list(FadeCurve))
    def test_monotonic(self, curve):
        g = fade_gain(np.linspace(0, 1, 101), curve)
        assert np.all(np.diff(g) >= 0)

    def test_input_is_clamped(self):
        assert fade_gain(-1.0) == 0.0
        assert fade_gain(2.0) == 1.0

    def test_exponential_below_linear(self):
        t = np.linspace(0.05, 0.95, 10)
        assert np.all(fade_gain(t, FadeCurve.EXPONENTIAL) < fade_gain(t, FadeCurve.LINEAR))


class TestFadeIn:

    def test_linear(self):
        out = apply_fade_in(ones(100), 50, FadeCurve.LINEAR)
        assert out[0] == pytest.approx(0.0, abs=0.01)
        assert out[25] == pytest.approx(0.5, abs=0.02)
        assert out[49] == pytest.approx(0.98, abs=0.05)
        assert out[50] == 1.0
        assert out[99] == 1.0

    def test_exponential(self):
        out = apply_fade_in(ones(100), 50, FadeCurve.EXPONENTIAL)
        assert out[0] < 0.01
        assert out[25] < 0.5
        assert out[49] > 0.9
        assert out[50] == 1.0

    def test_scurve(self):
        out = apply_fade_in(ones(100), 50, FadeCurve.SCURVE)
        assert out[0] < 0.01
        assert 0.3 < out[25] < 0.7
        assert out[49] > 0.95

    def test_empty(self):
        assert apply_fade_in(np.zeros(0, dtype=np.float32), 50).size == 0

    def test_zero_length_is_identity(self):
        buf = ones(100)
        assert np.array_equal(apply_fade_in(buf, 0), buf)

    def test_longer_than_buffer(self):
        out = apply_fade_in(ones(10), 100)
        assert out[0] < 0.01
        assert out[9] < 1.0

    def test_interleaved_samples(self):
        out = apply_fade_in(ones(6), 6)
        assert out[0] < 0.2
        assert out[1] < 0.2

    def test_frame_aware(self):
        """With channels=2 both samples of a frame get the same gain."""
        out = apply_fade_in(ones(8), 4, channels=2)
        assert out.tolist() == pytest.approx([0.0, 0.0, 0.25, 0.25, 0.5, 0.5, 0.75, 0.75])

    def test_input_untouched(self):
        buf = ones(20)
        apply_fade_in(buf, 10)
        assert np.all(buf == 1.0)

    @pytest.mark.parametrize("curve", list(FadeCurve))
    def test_envelope_never_amplifies(self, curve):
        rng = np.random.default_rng(3)
        buf = rng.uniform(-1, 1, 500).astype(np.float32)
        out = apply_fade_in(buf, 200, curve)
        assert np.all(np.abs(out) <= np.abs(buf) + 1e-7)
        assert np.array_equal(out[200:], buf[200:])


class TestFadeOut:

    def test_linear(self):
        out = apply_fade_out(ones(100), 50, FadeCurve.LINEAR)
        assert out[0] == 1.0
        assert out[49] == 1.0
        assert out[50] == pytest.approx(1.0, abs=0.05)
        assert out[75] == pytest.approx(0.5, abs=0.05)
        assert out[99] < 0.05

    def test_exponential(self):
        out = apply_fade_out(ones(100), 50, FadeCurve.EXPONENTIAL)
        assert out[49] == 1.0
        assert out[75] > 0.5
        assert out[99] < 0.1

    def test_ends_at_exact_zero(self):
        for curve in FadeCurve:
            assert apply_fade_out(ones(30), 7, curve)[-1] == 0.0

    def test_empty(self):
        assert apply_fade_out(np.zeros(0, dtype=np.float32), 50).size == 0

    def test_zero_length_is_identity(self):
        buf = ones(100)
        assert np.array_equal(apply_fade_out(buf, 0), buf)

    def test_longer_than_buffer(self):
        out = apply_fade_out(ones(10), 100)
        assert out[0] > 0.8
        assert out[9] < 0.2

    @pytest.mark.parametrize("curve", [FadeCurve.LINEAR, FadeCurve.SCURVE])
    def test_mirror_of_fade_in(self, curve):
        """Fade-out of a constant buffer is the fade-in reversed."""
        n = 64
        fin = apply_fade_in(ones(n), n, curve)
        fout = apply_fade_out(ones(n), n, curve)
        assert np.allclose(fout, fin[::-1], atol=1e-6)

    def test_frame_aware(self):
        out = apply_fade_out(ones(8), 2, channels=2)
        assert out.tolist() == pytest.approx([1.0, 1.0, 1.0, 1.0, 0.5, 0.5, 0.0, 0.0])


def test_apply_fade_dispatches_on_direction():
    buf = ones(10)
    assert np.array_equal(apply_fade(buf, FadeParams(4)), apply_fade_in(buf, 4))
    assert np.array_equal(
        apply_fade(buf, FadeParams(4, FadeCurve.SCURVE, FadeDirection.OUT)),
        apply_fade_out(buf, 4, FadeCurve.SCURVE))
