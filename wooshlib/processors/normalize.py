from __future__ import annotations

from typing import Any

from ..config import ParamSpec
from ..engine import normalize_to_peak, normalize_to_rms
from ..models import AudioClip, EditCommand
from ..processor import ClipProcessor, PRIORITY_NORMALIZE


class PeakNormalizeProcessor(ClipProcessor):
    id = "peak_normalize"
    name = "Peak Normalization"
    priority = PRIORITY_NORMALIZE

    @classmethod
    def config_params(cls) -> list[ParamSpec]:
        return [
            ParamSpec(
                key="peak_normalize", type=bool, default=False,
                label="Peak normalize",
                description="Scale each clip so its peak hits the target.",
            ),
            ParamSpec(
                key="target_peak", type=(int, float), default=-1.0,
                min=-80.0, max=0.0,
                label="Target peak (dBFS)",
            ),
        ]

    def configure(self, config: dict[str, Any]) -> None:
        self.enabled = bool(config.get("peak_normalize", False))
        self.target_peak = float(config.get("target_peak", -1.0))

    def command(self) -> EditCommand:
        return EditCommand("normalize_peak", {"target_dbfs": self.target_peak},
                           source=self.id)

    def apply(self, clip: AudioClip) -> AudioClip:
        return normalize_to_peak(clip, self.target_peak, strategy=self.strategy)


class RmsNormalizeProcessor(ClipProcessor):
    id = "rms_normalize"
    name = "RMS Normalization"
    priority = PRIORITY_NORMALIZE

    @classmethod
    def config_params(cls) -> list[ParamSpec]:
        return [
            ParamSpec(
                key="rms_normalize", type=bool, default=False,
                label="RMS normalize",
                description="Scale each clip so its RMS level hits the target. "
                            "Can push peaks above 0 dBFS on dynamic material.",
            ),
            ParamSpec(
                key="target_rms", type=(int, float), default=-18.0,
                min=-80.0, max=0.0,
                label="Target RMS (dB)",
            ),
        ]

    def configure(self, config: dict[str, Any]) -> None:
        self.enabled = bool(config.get("rms_normalize", False))
        self.target_rms = float(config.get("target_rms", -18.0))

    def command(self) -> EditCommand:
        return EditCommand("normalize_rms", {"target_db": self.target_rms},
                           source=self.id)

    def apply(self, clip: AudioClip) -> AudioClip:
        return normalize_to_rms(clip, self.target_rms, strategy=self.strategy)
