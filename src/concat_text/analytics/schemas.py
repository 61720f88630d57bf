"""Analytics event schemas.

One event per (processor, source) flush: how many flowfiles went in, where
they were routed, and optional metric summaries. Events are stored to
Parquet by AnalyticsSink.
"""

from __future__ import annotations
from typing import Dict, Any, List
import time

def make_event(
    *,
    run_id: str,
    stage: str,
    source: str,
    counts: Dict[str, int],
    routed: Dict[str, int] | None = None,
    metric_samples: Dict[str, List[float]] | None = None,
) -> Dict[str, Any]:
    return {
        "run_id": run_id,
        "stage": stage,
        "source": source,
        "timestamp_ms": int(time.time() * 1000),
        "counts": counts,
        "routed": routed or {},
        "metrics": {},
        "metric_samples": metric_samples or {},
    }
