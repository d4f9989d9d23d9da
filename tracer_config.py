"""Settings for the stage tracer, loaded from an optional YAML file.

Example file:

    encoding: strict        # strict | truncate | utf-8
    paced: true
    stage_delay: 1.0        # seconds after binary, padded and schedule stages
    round_delay: 0.05       # seconds after each round record
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

import yaml

from preprocess import ENCODINGS


CONFIG_ENV_VAR = "SHA256_STAGES_CONFIG"


@dataclass(frozen=True)
class TracerConfig:
    encoding: str = "strict"
    paced: bool = False
    stage_delay: float = 1.0
    round_delay: float = 0.05

    def __post_init__(self):
        if self.encoding not in ENCODINGS:
            raise ValueError(
                f"encoding must be one of {', '.join(ENCODINGS)}, got {self.encoding!r}"
            )
        if self.stage_delay < 0 or self.round_delay < 0:
            raise ValueError("Delays must be non-negative")

    def with_overrides(self, **overrides: Any) -> "TracerConfig":
        """Return a copy with every override that is not None applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _from_mapping(data: Dict[str, Any]) -> TracerConfig:
    known = {f.name: f for f in fields(TracerConfig)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ValueError(f"Unknown config key(s): {', '.join(unknown)}")

    values: Dict[str, Any] = {}
    for key, value in data.items():
        if key == "encoding":
            if not isinstance(value, str):
                raise ValueError(f"encoding must be a string, got {value!r}")
        elif key == "paced":
            if not isinstance(value, bool):
                raise ValueError(f"paced must be true or false, got {value!r}")
        elif isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{key} must be a number, got {value!r}")
        else:
            value = float(value)
        values[key] = value
    return TracerConfig(**values)


def load_config(path: Optional[str] = None) -> TracerConfig:
    """Load settings from `path`, or from $SHA256_STAGES_CONFIG if unset.

    Without either, the defaults are returned.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return TracerConfig()

    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Config file {path} is not valid YAML: {e}") from e

    if data is None:
        return TracerConfig()
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return _from_mapping(data)
