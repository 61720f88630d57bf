"""Show information about a completed run: routing totals, per-source counts,
relationship shards and length percentiles.

Usage:
    python scripts/show_run_info.py [output_dir]
"""

from __future__ import annotations
import glob
import json
import os
import sys
import pyarrow.parquet as pq

def show_run_info(out_dir: str) -> None:
    print(f"\n{'='*60}")
    print(f"Run Information: {out_dir}")
    print(f"{'='*60}\n")

    manifest_files = sorted(glob.glob(os.path.join(out_dir, "manifests", "*.json")))
    if not manifest_files:
        print("No manifest found. Has the run finished?")
        return

    with open(manifest_files[-1], "r", encoding="utf-8") as f:
        manifest = json.load(f)

    print("Run Summary:")
    print("-" * 60)
    print(f"  Run ID: {manifest.get('run_id')}")
    print(f"  Processor: {manifest.get('processor')}")
    print(f"  Input flowfiles: {manifest.get('total_input_units', 0):,}")
    for rel, n in (manifest.get("routed") or {}).items():
        print(f"  -> {rel}: {n:,}")

    sources = manifest.get("sources") or {}
    if sources:
        print("\nSources Processed:")
        print("-" * 60)
        for name, counts in sources.items():
            print(f"  {name}: {counts}")

    rel_dir = os.path.join(out_dir, "relationships")
    if os.path.isdir(rel_dir):
        print("\nRelationship Shards:")
        print("-" * 60)
        for rel in sorted(os.listdir(rel_dir)):
            shards = glob.glob(os.path.join(rel_dir, rel, "*", "shard_*"))
            size = sum(os.path.getsize(s) for s in shards)
            print(f"  {rel.replace('relationship=', '')}: {len(shards)} shards, {size / 1024:.1f} KB")

    aggs = os.path.join(out_dir, "analytics", "aggregates", "daily_aggregates.parquet")
    if os.path.exists(aggs):
        print("\nDaily Aggregates:")
        print("-" * 60)
        for row in pq.read_table(aggs).to_pylist():
            print(f"  {row}")
    print()

if __name__ == "__main__":
    show_run_info(sys.argv[1] if len(sys.argv) > 1 else "storage")
