"""File writers.

We keep writers simple and robust:
- write shards of routed flowfiles as Parquet (content kept as raw bytes)
- write a run manifest at the end
"""

from __future__ import annotations
from typing import Any, Dict, List
import json
import os
import pyarrow as pa
import pyarrow.parquet as pq
from ..pipeline.context import FlowFile


def flowfiles_schema() -> pa.Schema:
    return pa.schema([
        ("uuid", pa.string()),
        ("content", pa.binary()),
        ("attributes", pa.map_(pa.string(), pa.string())),
        ("size", pa.int64()),
    ], metadata={"schema_version": "v1"})


def write_flowfiles_shard(path: str, flowfiles: List[FlowFile]) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    rows = [
        {
            "uuid": ff.uuid,
            "content": bytes(ff.content),
            # map columns take a list of (key, value) pairs
            "attributes": sorted(ff.attributes.items()),
            "size": ff.size,
        }
        for ff in flowfiles
    ]
    table = pa.Table.from_pylist(rows, schema=flowfiles_schema())
    pq.write_table(table, path, compression="zstd")


def write_manifest(path: str, manifest: Dict[str, Any]) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2, ensure_ascii=False)
