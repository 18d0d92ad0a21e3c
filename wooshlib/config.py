from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any

from .parallel import ChunkStrategy

PRESET_SCHEMA_VERSION = "1.0"

# Keys that are CLI-only and never saved in presets
_INTERNAL_KEYS = {"execute", "output_folder", "output_format"}


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


@dataclass
class ConfigFieldError:
    """A single validation error for one configuration field.

    Attributes:
        key:     The config key that failed validation.
        value:   The offending value.
        message: Human-readable explanation of what is wrong.
    """
    key: str
    value: Any
    message: str


@dataclass(frozen=True)
class ParamSpec:
    """Declarative specification for a single configuration parameter.

    Processors and the shared engine section use these to describe their
    parameters: type, default, valid range, allowed values and labels.
    """
    key: str
    type: type | tuple              # expected Python type(s)
    default: Any
    label: str                       # short UI label
    description: str = ""            # longer help text
    min: float | int | None = None   # inclusive
    max: float | int | None = None   # inclusive
    choices: list | None = None      # allowed string values


# ---------------------------------------------------------------------------
# Shared engine section
# ---------------------------------------------------------------------------

ENGINE_PARAMS: list[ParamSpec] = [
    ParamSpec(
        key="max_workers", type=int, default=0, min=0,
        label="Worker threads",
        description="Thread-pool size for batch and chunked work. 0 picks "
                    "min(cpu count, 8).",
    ),
    ParamSpec(
        key="buffer_chunk_size", type=int, default=65536, min=1024,
        label="Buffer chunk size (samples)",
        description="Samples per chunk for parallel peak/RMS scans and gain.",
    ),
    ParamSpec(
        key="buffer_parallel_min", type=int, default=10_000, min=0,
        label="Parallel buffer threshold (samples)",
        description="Buffers shorter than this are always scanned inline.",
    ),
    ParamSpec(
        key="decimate_block_columns", type=int, default=64, min=1,
        label="Waveform block size (columns)",
        description="Columns per parallel decimation task.",
    ),
    ParamSpec(
        key="decimate_parallel_min_width", type=int, default=200, min=0,
        label="Parallel waveform threshold (columns)",
        description="Views narrower than this are decimated inline.",
    ),
]


def _all_param_specs() -> list[ParamSpec]:
    """Every :class:`ParamSpec` from the engine section and all processors."""
    from .processors import default_processors

    specs = list(ENGINE_PARAMS)
    for proc in default_processors():
        specs.extend(proc.config_params())
    return specs


def default_config() -> dict[str, Any]:
    """Returns the built-in default configuration (flat)."""
    return {p.key: p.default for p in _all_param_specs()}


def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge config dicts left-to-right; later values override earlier ones."""
    result: dict[str, Any] = {}
    for cfg in configs:
        result.update(cfg)
    return result


def strategy_from_config(config: dict[str, Any], kind: str = "buffer") -> ChunkStrategy:
    """Build the :class:`ChunkStrategy` for ``"buffer"`` or ``"decimate"`` work."""
    workers = config.get("max_workers", 0) or None
    if kind == "decimate":
        return ChunkStrategy(
            chunk_size=config.get("decimate_block_columns", 64),
            max_workers=workers,
            min_items=config.get("decimate_parallel_min_width", 200),
        )
    if kind != "buffer":
        raise ValueError(f"Unknown strategy kind: {kind}")
    return ChunkStrategy(
        chunk_size=config.get("buffer_chunk_size", 65536),
        max_workers=workers,
        min_items=config.get("buffer_parallel_min", 10_000),
    )


def load_preset(path: str) -> dict[str, Any]:
    """
    Load a JSON preset file. Returns a partial config dict.
    Raises ConfigError if the file cannot be read or parsed.
    """
    if not os.path.isfile(path):
        raise ConfigError(f"Preset file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in preset file {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read preset file {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Preset file must contain a JSON object, got {type(data).__name__}")

    return {k: v for k, v in data.items() if k not in ("schema_version", "_description")}


def save_preset(config: dict[str, Any], path: str, *, description: str | None = None) -> None:
    """
    Save a config dict as a JSON preset file.
    Only values that differ from the defaults are written.
    """
    preset: dict[str, Any] = {"schema_version": PRESET_SCHEMA_VERSION}
    if description:
        preset["_description"] = description

    defaults = default_config()
    for k, v in config.items():
        if k in _INTERNAL_KEYS or k.startswith("_"):
            continue
        if k in defaults and defaults[k] == v:
            continue
        preset[k] = v

    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(preset, f, indent=4, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Validation  (ParamSpec-driven)
# ---------------------------------------------------------------------------

def _type_name(expected) -> str:
    if isinstance(expected, tuple):
        return " or ".join(t.__name__ for t in expected)
    return expected.__name__


def _field_error(spec: ParamSpec, value: Any) -> str | None:
    """Message describing why *value* is not acceptable for *spec*, or None."""
    if value is None:
        return f"{spec.label} must not be empty."
    # bool is an int subclass; a flag is never a valid number
    if isinstance(value, bool) and spec.type is not bool:
        return f"{spec.label} must be {_type_name(spec.type)}, got boolean."
    if not isinstance(value, spec.type):
        return (f"{spec.label} must be {_type_name(spec.type)}, "
                f"got {type(value).__name__}.")
    if spec.choices is not None:
        if value not in spec.choices:
            return f"{spec.label} must be one of {', '.join(map(repr, spec.choices))}."
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if spec.min is not None and value < spec.min:
            return f"{spec.label} must be at least {spec.min}."
        if spec.max is not None and value > spec.max:
            return f"{spec.label} must be at most {spec.max}."
    return None


def validate_param_values(
    params: list[ParamSpec],
    values: dict[str, Any],
) -> list[ConfigFieldError]:
    """Check *values* against *params*.  Keys absent from *values* are skipped."""
    errors: list[ConfigFieldError] = []
    for spec in params:
        if spec.key in values:
            msg = _field_error(spec, values[spec.key])
            if msg:
                errors.append(ConfigFieldError(spec.key, values[spec.key], msg))
    return errors


def validate_config_fields(config: dict[str, Any]) -> list[ConfigFieldError]:
    """Validate a flat config dict against every known ParamSpec.  Never raises."""
    return validate_param_values(_all_param_specs(), config)


def validate_config(config: dict[str, Any]) -> None:
    """Raise :class:`ConfigError` listing every invalid field of *config*."""
    errors = validate_config_fields(config)
    if errors:
        raise ConfigError(
            "Configuration has invalid values:\n  • "
            + "\n  • ".join(e.message for e in errors)
        )
