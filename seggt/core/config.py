"""
Layer configuration (dataclass) with YAML/JSON loading.

A configuration file holds the parameters either at the top level
or nested under a `seggt_param` key:

    seggt_param:
      background_label_id: 0
      use_difficult_gt: false
"""

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

PARAM_KEY = "seggt_param"


def _load_mapping(path: Path) -> dict[str, Any]:
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    elif suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    else:
        raise ConfigError(f"Unsupported config file type: {path} (expected .json/.yaml/.yml).")

    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {path} must be a mapping.")

    return data


@dataclass(frozen=True)
class SegGtConfig:
    """Parameters of the SegGt layer."""

    background_label_id: int = 0
    use_difficult_gt: bool = True

    def __post_init__(self):
        # bool is a subclass of int and must not pass as a label id.
        if not isinstance(self.background_label_id, int) or isinstance(self.background_label_id, bool):
            raise ConfigError(f"background_label_id must be an int, got {self.background_label_id!r}.")
        if not isinstance(self.use_difficult_gt, bool):
            raise ConfigError(f"use_difficult_gt must be a bool, got {self.use_difficult_gt!r}.")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SegGtConfig":
        """
        Builds a config from a mapping.

        Args:
            data: Parameters, either flat or nested under 'seggt_param'.

        Returns
        -------
            config: Validated SegGtConfig.
        """
        if PARAM_KEY in data:
            data = data[PARAM_KEY]
            if data is None:
                data = {}
            if not isinstance(data, dict):
                raise ConfigError(f"'{PARAM_KEY}' must be a mapping.")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown SegGt parameters: {', '.join(unknown)}.")

        return cls(**data)


def load_config(path: str | Path) -> SegGtConfig:
    """Loads a SegGtConfig from a .json, .yaml or .yml file."""
    return SegGtConfig.from_dict(_load_mapping(Path(path)))
