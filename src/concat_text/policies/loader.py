"""Flow config loader.

Flow configs are YAML files. Keeping them in YAML allows:
- versioned configuration across runs
- reviewing property changes as plain diffs
"""

from __future__ import annotations
from typing import Any, Dict
import yaml

from ..errors import ConfigurationError


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data
