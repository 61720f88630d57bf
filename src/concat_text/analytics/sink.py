"""Analytics sink.

Two storage layers:
1) Raw events (append-only Parquet): `analytics/events/stage=.../date=.../events.parquet`
2) Aggregates (append-only Parquet): `analytics/aggregates/daily_aggregates.parquet`

Events may carry `metric_samples` (e.g. {"concatenated_length": [...]}); the
sink reduces them to p50/p90/p99 before writing.
"""

from __future__ import annotations
from typing import Dict, Any, List, Tuple
from datetime import datetime, timezone
import os
import numpy as np
import pyarrow as pa
import pyarrow.parquet as pq

def _percentiles(xs: List[float], ps=(50, 90, 99)) -> Dict[str, float]:
    if not xs:
        return {}
    arr = np.array(xs, dtype=np.float64)
    return {f"p{p}": float(np.percentile(arr, p)) for p in ps}

class AnalyticsSink:
    def __init__(self, out_dir: str, run_id: str):
        self.out_dir = out_dir
        self.run_id = run_id
        self.events_dir = os.path.join(out_dir, "analytics", "events")
        self.aggs_dir = os.path.join(out_dir, "analytics", "aggregates")
        os.makedirs(self.events_dir, exist_ok=True)
        os.makedirs(self.aggs_dir, exist_ok=True)

        # key=(date, stage, source) -> counters; flushed by flush_aggregates()
        self._agg: Dict[Tuple[str, str, str], Dict[str, Any]] = {}

    def emit(self, event: Dict[str, Any]) -> None:
        stage = event["stage"]
        date = datetime.fromtimestamp(event["timestamp_ms"] / 1000, tz=timezone.utc).date().isoformat()

        metric_samples = event.pop("metric_samples", None) or {}
        metrics = event.setdefault("metrics", {})
        for k, xs in metric_samples.items():
            for pk, pv in _percentiles(xs).items():
                metrics[f"{k}_{pk}"] = pv

        p = os.path.join(self.events_dir, f"stage={stage}", f"date={date}", "events.parquet")
        os.makedirs(os.path.dirname(p), exist_ok=True)
        self._append_parquet(p, [event])

        key = (date, stage, event["source"])
        cur = self._agg.setdefault(key, {
            "date": date, "stage": stage, "source": event["source"], "input_units": 0,
        })
        cur["input_units"] += int(event.get("counts", {}).get("input_units", 0))
        for rel, n in (event.get("routed") or {}).items():
            col = f"routed_{rel}"
            cur[col] = cur.get(col, 0) + int(n)
        # last write wins for percentiles
        for mk, mv in metrics.items():
            if isinstance(mv, (int, float)):
                cur[mk] = float(mv)

    def flush_aggregates(self) -> None:
        if not self._agg:
            return
        rows = list(self._agg.values())
        p = os.path.join(self.aggs_dir, "daily_aggregates.parquet")
        self._append_parquet(p, rows)
        self._agg.clear()

    def _normalize_row(self, row: Dict[str, Any]) -> Dict[str, Any]:
        # empty dicts cannot be written as Parquet structs
        return {k: (None if isinstance(v, dict) and not v else v) for k, v in row.items()}

    def _append_parquet(self, path: str, rows: List[Dict[str, Any]]) -> None:
        new_rows = [self._normalize_row(r) for r in rows]
        if os.path.exists(path) and os.path.getsize(path) > 0:
            existing = pq.read_table(path).to_pylist()
            new_rows = existing + new_rows
        # from_pylist takes column names from the first row only
        columns: Dict[str, None] = {}
        for r in new_rows:
            columns.update(dict.fromkeys(r))
        new_rows = [{c: r.get(c) for c in columns} for r in new_rows]
        table = pa.Table.from_pylist(new_rows)
        pq.write_table(table, path, compression="zstd")
