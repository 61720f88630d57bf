"""Writer registry.

Add new output formats without changing the host runner by registering
them here.
"""

from __future__ import annotations
from typing import Dict, List
from .base import RelationshipWriter
from .jsonl import JSONLRelationshipWriter
from .parquet import ParquetRelationshipWriter

_WRITERS: Dict[str, RelationshipWriter] = {
    "jsonl": JSONLRelationshipWriter(),
    "parquet": ParquetRelationshipWriter(),
}

def register_writer(name: str, writer: RelationshipWriter) -> None:
    """Register a new relationship writer at runtime."""
    if name in _WRITERS:
        raise ValueError(f"Writer '{name}' already registered")
    _WRITERS[name] = writer

def list_writers() -> List[str]:
    return list(_WRITERS.keys())

def get_writer(name: str) -> RelationshipWriter:
    if name not in _WRITERS:
        raise KeyError(
            f"Unknown writer: {name}. "
            f"Available: {list(_WRITERS)}. "
            f"Register with register_writer()"
        )
    return _WRITERS[name]
