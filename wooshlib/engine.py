"""Clip-level editing operations.

Each function takes an :class:`AudioClip` and returns a new clip with
refreshed peak/RMS metrics; the input clip is never touched.
"""

from __future__ import annotations

import logging

import numpy as np

from .dynamics import compress as _compress
from .fades import apply_fade_in, apply_fade_out
from .levels import compute_levels
from .models import AudioClip, CompressorParams, FadeCurve
from .normalize import normalize_to_peak as _normalize_peak
from .normalize import normalize_to_rms as _normalize_rms
from .parallel import SEQUENTIAL, ChunkStrategy

log = logging.getLogger(__name__)


def refresh_metrics(clip: AudioClip, samples: np.ndarray | None = None, *,
                    strategy: ChunkStrategy = SEQUENTIAL) -> AudioClip:
    """Return *clip* (optionally carrying new *samples*) with fresh metrics."""
    data = clip.samples if samples is None else samples
    peak_db, rms_db = compute_levels(data, strategy=strategy)
    return clip.with_samples(data, peak_db=peak_db, rms_db=rms_db)


def trim(clip: AudioClip, start_sec: float, end_sec: float) -> AudioClip:
    """Keep ``[start_sec, end_sec)``; ``end_sec <= 0`` means "to the end".

    Cut points are rounded down to whole frames.  An empty or inverted
    range leaves the clip unchanged.
    """
    if clip.samplerate <= 0:
        return clip
    start = int(max(0.0, start_sec) * clip.samplerate)
    end = 0 if end_sec <= 0 else max(int(end_sec * clip.samplerate), 1)
    return trim_frames(clip, start, end)


def trim_frames(clip: AudioClip, start_frame: int, end_frame: int) -> AudioClip:
    """Frame-based variant of :func:`trim` (``end_frame <= 0`` means "to the end")."""
    if clip.channels <= 0:
        return clip
    frames = clip.frame_count
    start = min(max(int(start_frame), 0), frames)
    end = frames if end_frame <= 0 else min(int(end_frame), frames)
    if start >= end:
        log.debug("trim ignored for %s: empty range %d..%d",
                  clip.display_name, start, end)
        return clip
    samples = clip.samples[start * clip.channels:end * clip.channels]
    return refresh_metrics(clip, samples)


def normalize_to_peak(clip: AudioClip, target_dbfs: float, *,
                      strategy: ChunkStrategy = SEQUENTIAL) -> AudioClip:
    return refresh_metrics(
        clip, _normalize_peak(clip.samples, target_dbfs, strategy=strategy),
        strategy=strategy)


def normalize_to_rms(clip: AudioClip, target_db: float, *,
                     strategy: ChunkStrategy = SEQUENTIAL) -> AudioClip:
    return refresh_metrics(
        clip, _normalize_rms(clip.samples, target_db, strategy=strategy),
        strategy=strategy)


def compress(clip: AudioClip, params: CompressorParams) -> AudioClip:
    return refresh_metrics(
        clip, _compress(clip.samples, params, clip.samplerate, clip.channels))


def fade_in(clip: AudioClip, frames: int,
            curve: FadeCurve = FadeCurve.LINEAR) -> AudioClip:
    """Fade in over *frames* frames (all channels of a frame share one gain)."""
    return refresh_metrics(
        clip, apply_fade_in(clip.samples, frames, curve, channels=clip.channels))


def fade_out(clip: AudioClip, frames: int,
             curve: FadeCurve = FadeCurve.LINEAR) -> AudioClip:
    return refresh_metrics(
        clip, apply_fade_out(clip.samples, frames, curve, channels=clip.channels))
