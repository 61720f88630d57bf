"""Relationship writers.

The host hands every committed flowfile to the writer for the relationship
it was transferred to. Writers persist one shard per call.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Iterable
import os
from ..pipeline.context import FlowFile


def shard_dir(out_dir: str, relationship: str, source: str) -> str:
    return os.path.join(out_dir, "relationships", f"relationship={relationship}", f"source={source}")


class RelationshipWriter(ABC):
    """Writes routed flowfiles in a chosen format."""
    name: str

    @abstractmethod
    def write_shard(
        self,
        flowfiles: Iterable[FlowFile],
        *,
        out_dir: str,
        relationship: str,
        source: str,
        shard_idx: int,
    ) -> str:
        """Write a shard and return the output path."""
        raise NotImplementedError
