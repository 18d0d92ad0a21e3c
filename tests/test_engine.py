"""
Unit tests for wooshlib.engine and the AudioClip model.
"""

import numpy as np
import pytest

from conftest import make_clip, make_sine
from wooshlib import engine
from wooshlib.audio import SILENT_DB
from wooshlib.models import AudioClip, CompressorParams, FadeCurve


class TestAudioClip:

    def test_samples_are_read_only(self, sine_clip):
        with pytest.raises(ValueError):
            sine_clip.samples[0] = 1.0

    def test_caller_buffer_not_frozen(self):
        buf = make_sine(frames=10)
        AudioClip("a.wav", 48000, 2, buf)
        buf[0] = 0.25
        assert buf.flags.writeable

    def test_geometry(self):
        clip = AudioClip("dir/kick.wav", 48000, 2, np.zeros(96000, dtype=np.float32))
        assert clip.display_name == "kick.wav"
        assert clip.frame_count == 48000
        assert clip.duration_sec == pytest.approx(1.0)

    def test_with_samples_keeps_metadata(self, sine_clip):
        other = sine_clip.with_samples(np.zeros(4, dtype=np.float32))
        assert other is not sine_clip
        assert other.samplerate == sine_clip.samplerate
        assert other.filepath == sine_clip.filepath

    def test_metrics_measured(self, sine_clip):
        assert sine_clip.peak_db == pytest.approx(-6.02, abs=0.05)
        assert sine_clip.rms_db < sine_clip.peak_db


class TestTrim:

    def test_trim_by_seconds(self):
        clip = make_clip(make_sine(frames=48000))
        out = engine.trim(clip, 0.25, 0.75)
        assert out.frame_count == 24000
        assert np.array_equal(out.samples, clip.samples[12000 * 2:36000 * 2])

    def test_end_zero_means_to_end(self):
        clip = make_clip(make_sine(frames=48000))
        assert engine.trim(clip, 0.5, 0).frame_count == 24000

    def test_degenerate_range_is_noop(self):
        clip = make_clip(make_sine(frames=4800))
        assert engine.trim(clip, 0.08, 0.02) is clip
        assert engine.trim(clip, 5.0, 0) is clip

    def test_trim_frames(self):
        clip = make_clip(make_sine(frames=100, channels=1), channels=1)
        out = engine.trim_frames(clip, 10, 20)
        assert out.frame_count == 10
        assert np.array_equal(out.samples, clip.samples[10:20])

    def test_metrics_refreshed(self):
        samples = np.concatenate([np.full(100, 0.9, dtype=np.float32),
                                  np.full(100, 0.1, dtype=np.float32)])
        clip = make_clip(samples, channels=1, samplerate=100)
        out = engine.trim(clip, 1.0, 0)
        assert out.peak_db == pytest.approx(-20.0, abs=0.01)


class TestEditing:

    def test_normalize_peak(self, sine_clip):
        out = engine.normalize_to_peak(sine_clip, -1.0)
        assert out.peak_db == pytest.approx(-1.0, abs=0.01)
        assert sine_clip.peak_db == pytest.approx(-6.02, abs=0.05)

    def test_normalize_rms(self, sine_clip):
        out = engine.normalize_to_rms(sine_clip, -18.0)
        assert out.rms_db == pytest.approx(-18.0, abs=0.01)

    def test_normalize_silent_clip(self):
        clip = make_clip(np.zeros(100, dtype=np.float32))
        out = engine.normalize_to_peak(clip, 0.0)
        assert out.peak_db == SILENT_DB

    def test_compress(self):
        clip = make_clip(make_sine(frames=4800, amplitude=1.0))
        out = engine.compress(clip, CompressorParams(attack_ms=1.0))
        assert out.peak_db < clip.peak_db

    def test_fades_are_frame_aware(self):
        clip = make_clip(np.ones(20, dtype=np.float32), channels=2)
        out = engine.fade_in(clip, 5, FadeCurve.LINEAR)
        frames = out.samples.reshape(-1, 2)
        assert np.array_equal(frames[:, 0], frames[:, 1])
        assert frames[0, 0] == 0.0
        out = engine.fade_out(clip, 5)
        assert out.samples[-1] == 0.0 and out.samples[-2] == 0.0

    def test_refresh_metrics(self):
        clip = AudioClip("a.wav", 48000, 1, np.full(10, 0.5, dtype=np.float32))
        assert clip.peak_db == SILENT_DB
        assert engine.refresh_metrics(clip).peak_db == pytest.approx(-6.02, abs=0.01)
