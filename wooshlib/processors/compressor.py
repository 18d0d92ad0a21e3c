from __future__ import annotations

from typing import Any

from ..config import ParamSpec
from ..engine import compress
from ..models import AudioClip, CompressorParams, EditCommand
from ..processor import ClipProcessor, PRIORITY_DYNAMICS

_DEFAULTS = CompressorParams()


class CompressorProcessor(ClipProcessor):
    id = "compressor"
    name = "Compressor"
    priority = PRIORITY_DYNAMICS

    @classmethod
    def config_params(cls) -> list[ParamSpec]:
        return [
            ParamSpec(
                key="compress", type=bool, default=False,
                label="Compress",
            ),
            ParamSpec(
                key="comp_threshold_db", type=(int, float),
                default=_DEFAULTS.threshold_db, min=-80.0, max=0.0,
                label="Threshold (dB)",
                description="Level above which gain reduction starts.",
            ),
            ParamSpec(
                key="comp_ratio", type=(int, float), default=_DEFAULTS.ratio,
                min=1.0,
                label="Ratio",
                description="4.0 means 4:1. 1.0 disables gain reduction.",
            ),
            ParamSpec(
                key="comp_attack_ms", type=(int, float),
                default=_DEFAULTS.attack_ms, min=0.0,
                label="Attack (ms)",
            ),
            ParamSpec(
                key="comp_release_ms", type=(int, float),
                default=_DEFAULTS.release_ms, min=0.0,
                label="Release (ms)",
            ),
            ParamSpec(
                key="comp_makeup_db", type=(int, float),
                default=_DEFAULTS.makeup_db, min=-24.0, max=24.0,
                label="Makeup gain (dB)",
                description="Applied to the whole clip after compression.",
            ),
        ]

    def configure(self, config: dict[str, Any]) -> None:
        self.enabled = bool(config.get("compress", False))
        self.params = CompressorParams(
            threshold_db=float(config.get("comp_threshold_db", _DEFAULTS.threshold_db)),
            ratio=float(config.get("comp_ratio", _DEFAULTS.ratio)),
            attack_ms=float(config.get("comp_attack_ms", _DEFAULTS.attack_ms)),
            release_ms=float(config.get("comp_release_ms", _DEFAULTS.release_ms)),
            makeup_db=float(config.get("comp_makeup_db", _DEFAULTS.makeup_db)),
        )

    def command(self) -> EditCommand:
        p = self.params
        return EditCommand("compress", {
            "threshold_db": p.threshold_db,
            "ratio": p.ratio,
            "attack_ms": p.attack_ms,
            "release_ms": p.release_ms,
            "makeup_db": p.makeup_db,
        }, source=self.id)

    def apply(self, clip: AudioClip) -> AudioClip:
        return compress(clip, self.params)
