from __future__ import annotations

from typing import Any

from ..config import ParamSpec
from ..engine import refresh_metrics
from ..fades import apply_fade_in, apply_fade_out
from ..models import AudioClip, EditCommand, FadeCurve
from ..processor import ClipProcessor, PRIORITY_FADE
from ..regions import resolve


class FadeProcessor(ClipProcessor):
    """Fade the head and tail of each clip.

    Lengths are given in milliseconds and converted per clip.  Both fades
    are capped at half the clip length, exactly as the editor draws them.
    """

    id = "fade"
    name = "Fades"
    priority = PRIORITY_FADE

    @classmethod
    def config_params(cls) -> list[ParamSpec]:
        return [
            ParamSpec(
                key="fade_in_ms", type=(int, float), default=0.0, min=0.0,
                label="Fade in (ms)",
            ),
            ParamSpec(
                key="fade_out_ms", type=(int, float), default=0.0, min=0.0,
                label="Fade out (ms)",
            ),
            ParamSpec(
                key="fade_curve", type=str, default=FadeCurve.LINEAR.value,
                choices=[c.value for c in FadeCurve],
                label="Fade curve",
            ),
        ]

    def configure(self, config: dict[str, Any]) -> None:
        self.fade_in_ms = float(config.get("fade_in_ms", 0.0))
        self.fade_out_ms = float(config.get("fade_out_ms", 0.0))
        self.curve = FadeCurve(config.get("fade_curve", FadeCurve.LINEAR.value))
        self.enabled = self.fade_in_ms > 0.0 or self.fade_out_ms > 0.0

    def command(self) -> EditCommand:
        return EditCommand("fade", {"fade_in_ms": self.fade_in_ms,
                                    "fade_out_ms": self.fade_out_ms,
                                    "curve": self.curve.value}, source=self.id)

    def fade_frames(self, clip: AudioClip) -> tuple[int, int]:
        """Fade lengths in frames for *clip*, after capping."""
        sr = clip.samplerate
        ranges = resolve(
            clip.frame_count,
            fade_in_len=int(round(self.fade_in_ms * 0.001 * sr)),
            fade_out_len=int(round(self.fade_out_ms * 0.001 * sr)),
        )
        return (ranges.fade_in_end - ranges.fade_in_start,
                ranges.fade_out_end - ranges.fade_out_start)

    def apply(self, clip: AudioClip) -> AudioClip:
        n_in, n_out = self.fade_frames(clip)
        samples = apply_fade_in(clip.samples, n_in, self.curve, channels=clip.channels)
        samples = apply_fade_out(samples, n_out, self.curve, channels=clip.channels)
        return refresh_metrics(clip, samples)
