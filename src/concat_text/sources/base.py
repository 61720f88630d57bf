"""Flowfile source interface.

A source turns some external dataset into a stream of FlowFiles for the
host to enqueue. All sources expose a `stream()` generator.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Union
from ..pipeline.context import FlowFile


@dataclass
class SourceSpec:
    name: str
    kind: str                        # implementation key, e.g. local_jsonl
    dataset: Union[str, List[str]]   # file, directory, glob pattern, or list of those
    content_field: str = "content"
    attributes_field: str = "attributes"
    charset: str = "UTF-8"           # used to turn JSON text into content bytes
    attributes: Dict[str, str] = field(default_factory=dict)  # added to every flowfile


class FlowFileSource:
    """Base interface for all sources."""
    name: str

    def metadata(self) -> Dict[str, Any]:
        return {}

    def stream(self) -> Iterable[FlowFile]:
        raise NotImplementedError
