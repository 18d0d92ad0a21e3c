from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .config import ParamSpec
from .models import AudioClip, EditCommand
from .parallel import SEQUENTIAL, ChunkStrategy


# Priority band constants
PRIORITY_TRIM = 0
PRIORITY_NORMALIZE = 100
PRIORITY_DYNAMICS = 150
PRIORITY_FADE = 200


class ClipProcessor(ABC):
    """
    One editing step in the clip chain.
    command() describes what will be done (pure, no audio touched).
    apply() returns a new clip; the input clip is never modified.
    """
    id: str = ""
    name: str = ""
    priority: int = PRIORITY_NORMALIZE

    def __init__(self) -> None:
        self.enabled = False
        self.strategy: ChunkStrategy = SEQUENTIAL
        self.configure({})

    @classmethod
    def config_params(cls) -> list[ParamSpec]:
        """Return parameter specifications for this processor."""
        return []

    def configure(self, config: dict[str, Any]) -> None:
        """Pull relevant keys from a flat config dict."""
        pass

    @abstractmethod
    def command(self) -> EditCommand:
        """The operation and parameters this processor will apply."""
        ...

    @abstractmethod
    def apply(self, clip: AudioClip) -> AudioClip:
        """Return the processed clip with refreshed metrics."""
        ...
