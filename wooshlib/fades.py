"""Fade-in / fade-out gain envelopes."""

from __future__ import annotations

import numpy as np

from .audio import as_buffer
from .models import FadeCurve, FadeDirection, FadeParams


def fade_gain(t, curve: FadeCurve = FadeCurve.LINEAR) -> np.ndarray:
    """Gain for normalized fade position *t* (clamped to [0, 1]).

    Linear ``t``, exponential ``t**2``, S-curve (smoothstep) ``3t² - 2t³``.
    """
    t = np.clip(np.asarray(t, dtype=np.float64), 0.0, 1.0)
    if curve is FadeCurve.EXPONENTIAL:
        return t * t
    if curve is FadeCurve.SCURVE:
        return t * t * (3.0 - 2.0 * t)
    return t


def _positions(count: int, channels: int) -> tuple[int, int]:
    """Return (step, units): samples per fade step and number of steps."""
    step = max(int(channels), 1)
    return step, -(-count // step)


def apply_fade_in(buffer, fade_length_samples: int,
                  curve: FadeCurve = FadeCurve.LINEAR, *,
                  channels: int = 1) -> np.ndarray:
    """Ramp the start of *buffer* up from silence; returns a new array.

    The fade covers ``min(fade_length_samples, len)`` positions and starts
    at exactly zero gain.  With ``channels > 1`` the length is counted in
    frames and every sample of a frame receives the same gain.
    """
    data = as_buffer(buffer)
    out = data.copy()
    step, units = _positions(data.size, channels)
    n = min(max(int(fade_length_samples), 0), units)
    if n == 0:
        return out
    end = min(n * step, data.size)
    pos = np.arange(end) // step
    out[:end] *= fade_gain(pos / n, curve).astype(np.float32)
    return out


def apply_fade_out(buffer, fade_length_samples: int,
                   curve: FadeCurve = FadeCurve.LINEAR, *,
                   channels: int = 1) -> np.ndarray:
    """Ramp the end of *buffer* down to silence; returns a new array.

    Position ``j`` of the fade window gets ``1 - gain((j + 1) / n)``, so the
    last position lands on exactly zero.  For the symmetric curves (linear,
    S-curve) a fade-out is the mirror image of the equal-length fade-in.
    """
    data = as_buffer(buffer)
    out = data.copy()
    step, units = _positions(data.size, channels)
    n = min(max(int(fade_length_samples), 0), units)
    if n == 0:
        return out
    first_unit = units - n
    begin = first_unit * step
    pos = np.arange(begin, data.size) // step - first_unit
    out[begin:] *= (1.0 - fade_gain((pos + 1) / n, curve)).astype(np.float32)
    return out


def apply_fade(buffer, params: FadeParams, *, channels: int = 1) -> np.ndarray:
    if params.direction is FadeDirection.OUT:
        return apply_fade_out(buffer, params.length, params.curve, channels=channels)
    return apply_fade_in(buffer, params.length, params.curve, channels=channels)
