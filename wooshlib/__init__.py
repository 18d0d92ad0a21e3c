from ._version import __version__
from .models import (
    FadeCurve,
    FadeDirection,
    JobStatus,
    CompressorParams,
    FadeParams,
    AudioClip,
    EditCommand,
    EditResult,
    BatchItem,
)
from .pipeline import Pipeline, load_clips, export_clips
from .config import (
    default_config,
    merge_configs,
    validate_config,
    validate_config_fields,
    validate_param_values,
    strategy_from_config,
    load_preset,
    save_preset,
    ConfigError,
    ConfigFieldError,
    ParamSpec,
    ENGINE_PARAMS,
)
from .parallel import ChunkStrategy, SEQUENTIAL, BUFFER_PARALLEL, DECIMATE_PARALLEL
from .processor import ClipProcessor
from .processors import default_processors
from .history import EditHistory
from .audio import AudioLoadError, load_clip, write_clip
from .events import EventBus

__all__ = [
    "__version__",
    "FadeCurve",
    "FadeDirection",
    "JobStatus",
    "CompressorParams",
    "FadeParams",
    "AudioClip",
    "EditCommand",
    "EditResult",
    "BatchItem",
    "Pipeline",
    "load_clips",
    "export_clips",
    "default_config",
    "merge_configs",
    "validate_config",
    "validate_config_fields",
    "validate_param_values",
    "strategy_from_config",
    "load_preset",
    "save_preset",
    "ConfigError",
    "ConfigFieldError",
    "ParamSpec",
    "ENGINE_PARAMS",
    "ChunkStrategy",
    "SEQUENTIAL",
    "BUFFER_PARALLEL",
    "DECIMATE_PARALLEL",
    "ClipProcessor",
    "default_processors",
    "EditHistory",
    "AudioLoadError",
    "load_clip",
    "write_clip",
    "EventBus",
]
