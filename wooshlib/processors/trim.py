from __future__ import annotations

from typing import Any

from ..config import ParamSpec
from ..engine import trim
from ..models import AudioClip, EditCommand
from ..processor import ClipProcessor, PRIORITY_TRIM


class TrimProcessor(ClipProcessor):
    """Cut each clip to ``[trim_start_sec, trim_end_sec)``.

    Runs first so normalization and fades see only the material that is
    kept.  An end of 0 keeps everything up to the end of the clip.
    """

    id = "trim"
    name = "Trim"
    priority = PRIORITY_TRIM

    @classmethod
    def config_params(cls) -> list[ParamSpec]:
        return [
            ParamSpec(
                key="trim_start_sec", type=(int, float), default=0.0, min=0.0,
                label="Trim start (s)",
            ),
            ParamSpec(
                key="trim_end_sec", type=(int, float), default=0.0, min=0.0,
                label="Trim end (s)",
                description="0 keeps the clip up to its end.",
            ),
        ]

    def configure(self, config: dict[str, Any]) -> None:
        self.start_sec = float(config.get("trim_start_sec", 0.0))
        self.end_sec = float(config.get("trim_end_sec", 0.0))
        self.enabled = self.start_sec > 0.0 or self.end_sec > 0.0

    def command(self) -> EditCommand:
        return EditCommand("trim", {"start_sec": self.start_sec,
                                    "end_sec": self.end_sec}, source=self.id)

    def apply(self, clip: AudioClip) -> AudioClip:
        return trim(clip, self.start_sec, self.end_sec)
