from __future__ import annotations
import os
from typing import Iterable
from .base import RelationshipWriter, shard_dir
from ..pipeline.context import FlowFile
from ..storage.writer import write_flowfiles_shard

class ParquetRelationshipWriter(RelationshipWriter):
    name = "parquet"

    def write_shard(
        self,
        flowfiles: Iterable[FlowFile],
        *,
        out_dir: str,
        relationship: str,
        source: str,
        shard_idx: int,
    ) -> str:
        base = shard_dir(out_dir, relationship, source)
        os.makedirs(base, exist_ok=True)
        path = os.path.join(base, f"shard_{shard_idx:06d}.parquet")
        write_flowfiles_shard(path, list(flowfiles))
        return path
