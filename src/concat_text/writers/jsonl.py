from __future__ import annotations
import os, json
from typing import Iterable
from .base import RelationshipWriter, shard_dir
from ..pipeline.context import FlowFile

class JSONLRelationshipWriter(RelationshipWriter):
    name = "jsonl"

    def __init__(self, charset: str = "utf-8"):
        # undecodable bytes (failure routes) are written with U+FFFD replacements
        self.charset = charset

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
        path = os.path.join(base, f"shard_{shard_idx:06d}.jsonl")
        with open(path, "w", encoding="utf-8") as f:
            for ff in flowfiles:
                f.write(json.dumps(ff.to_dict(self.charset), ensure_ascii=False) + "\n")
        return path
