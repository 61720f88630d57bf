"""Processor registry.

Processors are configured by name in `flow.yaml` under `processor.type`.
New processors are added with `register_processor()` without touching the
host runner.
"""

from __future__ import annotations
from typing import Any, Dict, List, Mapping, Tuple, Type
from .base import Processor
from .concat_text import ConcatText

_PROCESSORS: Dict[str, Type[Processor]] = {
    ConcatText.name: ConcatText,
}


def register_processor(name: str, cls: Type[Processor]) -> None:
    if name in _PROCESSORS:
        raise ValueError(f"Processor '{name}' already registered")
    _PROCESSORS[name] = cls


def list_processors() -> List[str]:
    return sorted(_PROCESSORS)


def get_processor_class(name: str) -> Type[Processor]:
    if name not in _PROCESSORS:
        raise KeyError(
            f"Unknown processor: {name}. "
            f"Available: {list_processors()}. "
            f"Register with register_processor()"
        )
    return _PROCESSORS[name]


def make_processor(proc_cfg: Mapping[str, Any]) -> Tuple[Processor, Dict[str, str]]:
    """Instantiate the configured processor.

    Returns the processor and its raw property values (stringified). Values
    are validated later, when the host initialises the processor.
    """
    cls = get_processor_class(proc_cfg.get("type", ConcatText.name))
    raw = proc_cfg.get("properties") or {}
    properties = {str(k): str(v) for k, v in raw.items() if v is not None}
    return cls(), properties
