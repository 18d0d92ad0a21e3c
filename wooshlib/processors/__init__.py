from .trim import TrimProcessor
from .normalize import PeakNormalizeProcessor, RmsNormalizeProcessor
from .compressor import CompressorProcessor
from .fade import FadeProcessor


def default_processors():
    """Returns all built-in clip processors."""
    return [
        TrimProcessor(),
        PeakNormalizeProcessor(),
        RmsNormalizeProcessor(),
        CompressorProcessor(),
        FadeProcessor(),
    ]


__all__ = [
    "default_processors",
    "TrimProcessor",
    "PeakNormalizeProcessor",
    "RmsNormalizeProcessor",
    "CompressorProcessor",
    "FadeProcessor",
]
