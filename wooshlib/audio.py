from __future__ import annotations

import logging
import os

import numpy as np
import soundfile as sf

from .models import AudioClip

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Conversion helpers
# ---------------------------------------------------------------------------

SILENT_DB = float("-inf")
EPSILON = 1e-9

AUDIO_EXTENSIONS = (".wav", ".aif", ".aiff", ".flac", ".mp3")


class AudioLoadError(Exception):
    """Raised when an audio file cannot be decoded."""
    pass


def db_to_linear(db: float) -> float:
    return 10 ** (db / 20.0)


def linear_to_db(linear: float) -> float:
    """Magnitude to dB.  Exactly zero (or less) maps to :data:`SILENT_DB`."""
    if linear <= 0:
        return SILENT_DB
    return float(20 * np.log10(max(float(linear), EPSILON)))


def format_duration(frames: int, samplerate: int) -> str:
    if samplerate <= 0:
        return "00:00.000"
    seconds = frames / samplerate
    m = int(seconds // 60)
    s = int(seconds % 60)
    ms = int((seconds % 1) * 1000)
    return f"{m:02d}:{s:02d}.{ms:03d}"


def as_buffer(samples) -> np.ndarray:
    """Coerce *samples* to a 1-D contiguous float32 array (no copy if possible)."""
    return np.ascontiguousarray(samples, dtype=np.float32).reshape(-1)


def deinterleave(samples: np.ndarray, channels: int) -> np.ndarray:
    """View an interleaved buffer as ``(frames, channels)``.

    A trailing partial frame is dropped.
    """
    data = as_buffer(samples)
    if channels <= 0:
        return data.reshape(0, 1)
    frames = data.size // channels
    return data[:frames * channels].reshape(frames, channels)


def interleave(frames: np.ndarray) -> np.ndarray:
    """Flatten a ``(frames, channels)`` array (or mono 1-D) to interleaved float32."""
    return as_buffer(np.asarray(frames))


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------

def load_clip(filepath: str) -> AudioClip:
    """Decode an audio file into an :class:`AudioClip` with fresh metrics."""
    from .levels import compute_levels

    try:
        info = sf.info(filepath)
        data, samplerate = sf.read(filepath, dtype="float32", always_2d=True)
    except (sf.LibsndfileError, RuntimeError, OSError) as e:
        raise AudioLoadError(f"Cannot decode {filepath}: {e}") from e

    samples = interleave(data)
    peak_db, rms_db = compute_levels(samples)
    log.debug("loaded %s: %d ch, %d Hz, %d frames",
              filepath, data.shape[1], samplerate, data.shape[0])
    return AudioClip(
        filepath=filepath,
        samplerate=int(samplerate),
        channels=int(data.shape[1]),
        samples=samples,
        peak_db=peak_db,
        rms_db=rms_db,
        subtype=info.subtype,
    )


def write_clip(clip: AudioClip, output_path: str, subtype: str | None = None) -> None:
    """Write a clip to disk.  The container is chosen from the extension.

    The clip's own subtype is kept when the target container supports it,
    otherwise libsndfile's default for that container is used.
    """
    subtype = subtype or clip.subtype
    ext = os.path.splitext(output_path)[1].lower().lstrip(".")
    fmt = {"aif": "AIFF", "aiff": "AIFF"}.get(ext, ext.upper())
    if subtype and not sf.check_format(fmt, subtype):
        subtype = None
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    frames = deinterleave(clip.samples, clip.channels)
    sf.write(output_path, frames, clip.samplerate, subtype=subtype)
