"""Source registry: maps `kind` in flow.yaml to a source implementation."""

from __future__ import annotations
from typing import Callable, Dict
from .base import FlowFileSource, SourceSpec
from .local_jsonl import LocalJSONLSource

_SOURCES: Dict[str, Callable[[SourceSpec], FlowFileSource]] = {
    "local_jsonl": LocalJSONLSource,
}


def register_source(kind: str, factory: Callable[[SourceSpec], FlowFileSource]) -> None:
    if kind in _SOURCES:
        raise ValueError(f"Source kind '{kind}' already registered")
    _SOURCES[kind] = factory


def make_source(spec: SourceSpec) -> FlowFileSource:
    if spec.kind not in _SOURCES:
        raise ValueError(f"Unknown source kind: {spec.kind}. Available: {sorted(_SOURCES)}")
    return _SOURCES[spec.kind](spec)


def list_sources() -> Dict[str, str]:
    return {kind: getattr(f, "__name__", repr(f)) for kind, f in _SOURCES.items()}
