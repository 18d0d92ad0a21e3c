from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

import numpy as np


class FadeCurve(Enum):
    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    SCURVE = "scurve"


class FadeDirection(Enum):
    IN = "in"
    OUT = "out"


class JobStatus(Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class CompressorParams:
    """Compressor settings.  Defaults match the processing panel."""
    threshold_db: float = -12.0
    ratio: float = 4.0
    attack_ms: float = 10.0
    release_ms: float = 100.0
    makeup_db: float = 0.0


@dataclass(frozen=True)
class FadeParams:
    length: int
    curve: FadeCurve = FadeCurve.LINEAR
    direction: FadeDirection = FadeDirection.IN


@dataclass(frozen=True, eq=False)
class AudioClip:
    """An immutable in-memory clip: interleaved float32 samples plus layout.

    ``samples`` is stored as a read-only contiguous float32 array.  A
    writable array passed in is copied first, so the caller's buffer is
    never frozen or aliased.  Editing a clip means building a new one
    (see :meth:`with_samples`); old instances stay valid as undo
    snapshots.

    Attributes:
        filepath:   Source path (display name is derived from it).
        samplerate: Frames per second.
        channels:   Interleaved channel count.
        samples:    1-D interleaved sample buffer.
        peak_db:    Cached peak level in dBFS (``-inf`` when silent).
        rms_db:     Cached RMS level in dB (``-inf`` when silent).
        subtype:    soundfile subtype used when writing the clip back.
    """
    filepath: str
    samplerate: int
    channels: int
    samples: np.ndarray = field(repr=False)
    peak_db: float = float("-inf")
    rms_db: float = float("-inf")
    subtype: str = "FLOAT"

    def __post_init__(self) -> None:
        data = np.ascontiguousarray(self.samples, dtype=np.float32).reshape(-1)
        if data.flags.writeable:
            data = data.copy()
            data.flags.writeable = False
        object.__setattr__(self, "samples", data)

    @property
    def display_name(self) -> str:
        return os.path.basename(self.filepath)

    @property
    def frame_count(self) -> int:
        if self.channels <= 0:
            return 0
        return int(self.samples.size // self.channels)

    @property
    def duration_sec(self) -> float:
        if self.channels <= 0 or self.samplerate <= 0:
            return 0.0
        return self.samples.size / float(self.channels * self.samplerate)

    def with_samples(self, samples: np.ndarray, *,
                     peak_db: float | None = None,
                     rms_db: float | None = None) -> AudioClip:
        """Return a copy of this clip carrying *samples* (metrics optional)."""
        return replace(
            self,
            samples=samples,
            peak_db=self.peak_db if peak_db is None else peak_db,
            rms_db=self.rms_db if rms_db is None else rms_db,
        )


@dataclass(frozen=True)
class EditCommand:
    """A single clip operation and the parameters it was applied with.

    Plain data: the processor that produced it performs the edit.  The
    history layer records these so the applied chain can be replayed or
    displayed.
    """
    command_type: str
    params: dict[str, Any] = field(default_factory=dict)
    source: str = ""


@dataclass(frozen=True)
class EditResult:
    """Outcome of applying one EditCommand: immutable before/after snapshots."""
    command: EditCommand
    before: AudioClip
    after: AudioClip
    error: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def gain_db(self) -> float:
        """Peak level change caused by the edit (0.0 when not measurable)."""
        if not (np.isfinite(self.before.peak_db) and np.isfinite(self.after.peak_db)):
            return 0.0
        return float(self.after.peak_db - self.before.peak_db)


@dataclass
class BatchItem:
    """One clip travelling through the batch pipeline."""
    index: int
    source: AudioClip
    status: JobStatus = JobStatus.PENDING
    results: list[EditResult] = field(default_factory=list)
    output: AudioClip | None = None
    errors: list[str] = field(default_factory=list)
    completed_at: datetime | None = None
