import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import numpy as np
import pytest

from wooshlib.engine import refresh_metrics
from wooshlib.models import AudioClip


def make_sine(freq=440.0, sample_rate=48000, frames=48000, channels=2, amplitude=1.0):
    """Interleaved float32 sine, the same value on every channel."""
    t = np.arange(frames, dtype=np.float64) / sample_rate
    mono = (np.sin(2 * np.pi * freq * t) * amplitude).astype(np.float32)
    return np.repeat(mono, channels)


def make_clip(samples, samplerate=48000, channels=2, filepath="clip.wav"):
    """Build a clip with measured peak/RMS levels."""
    clip = AudioClip(filepath=filepath, samplerate=samplerate,
                     channels=channels, samples=samples)
    return refresh_metrics(clip)


@pytest.fixture
def sine_clip():
    return make_clip(make_sine(frames=4800, amplitude=0.5))
