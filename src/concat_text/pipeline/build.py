"""Host runner.

Drives one processor over flowfiles from configured sources:
- validates properties before anything is scheduled
- runs the lifecycle: on_added -> on_scheduled -> triggers -> on_unscheduled
  -> on_stopped -> on_removed (teardown always runs)
- one session per trigger; committed transfers go to relationship writers
- a trigger that raises is rolled back and its flowfiles routed to failure
- emits analytics per flush and writes a run manifest

`run_processor` is the in-memory equivalent used by the CLI and tests.
"""

from __future__ import annotations
from contextlib import contextmanager
from itertools import islice
from typing import Any, Dict, Iterable, Iterator, List, Mapping
import logging
import os
import time
from tqdm import tqdm

from ..analytics.schemas import make_event
from ..analytics.sink import AnalyticsSink
from ..errors import ConfigurationError
from ..sources.base import SourceSpec
from ..sources.registry import make_source
from ..stages.base import Processor
from ..stages.concat_text import CONCATENATED_STRING_LENGTH
from ..stages.registry import make_processor
from ..storage.writer import write_manifest
from ..writers.registry import get_writer
from .context import CONCAT_ERROR, FlowFile, ProcessContext
from .session import FlowFileQueue, ProcessSession

log = logging.getLogger("concat_text.build")

FAILURE_NAME = "failure"

Transfers = Dict[str, List[FlowFile]]


@contextmanager
def scheduled(processor: Processor, properties: Mapping[str, str]) -> Iterator[ProcessContext]:
    """Validate, add and schedule `processor`; tear it down on exit."""
    context = processor.init(properties)
    processor.on_added()
    try:
        processor.on_scheduled(context)
        try:
            yield context
        finally:
            processor.on_unscheduled()
            processor.on_stopped()
    finally:
        processor.on_removed()


def trigger_once(processor: Processor, context: ProcessContext, queue: FlowFileQueue) -> Transfers:
    session = ProcessSession(queue, processor.relationships)
    try:
        processor.on_trigger(context, session)
        return session.commit()
    except Exception as e:
        originals = session.rollback()
        if not originals:
            raise
        if FAILURE_NAME not in {r.name for r in processor.relationships}:
            # nowhere to route: put the work back and let the caller decide
            queue.requeue(originals)
            raise
        log.exception(f"trigger failed processor={processor.name} units={len(originals)}: {e}")
        return {FAILURE_NAME: [ff.with_attributes({CONCAT_ERROR: f"{type(e).__name__}: {e}"}) for ff in originals]}


def drain(processor: Processor, context: ProcessContext, queue: FlowFileQueue) -> Transfers:
    """Trigger until the queue is empty; return all transfers by relationship."""
    out: Transfers = {}
    while len(queue):
        before = len(queue)
        transfers = trigger_once(processor, context, queue)
        for rel, ffs in transfers.items():
            out.setdefault(rel, []).extend(ffs)
        if len(queue) >= before and not transfers:
            log.warning(f"processor={processor.name} made no progress with {before} queued; stopping")
            break
    return out


def run_processor(
    processor: Processor,
    flowfiles: Iterable[FlowFile],
    properties: Mapping[str, str],
) -> Transfers:
    with scheduled(processor, properties) as context:
        return drain(processor, context, FlowFileQueue(flowfiles))


def _batches(it: Iterable[FlowFile], size: int) -> Iterator[List[FlowFile]]:
    it = iter(it)
    while True:
        batch = list(islice(it, size))
        if not batch:
            return
        yield batch


def _length_samples(flowfiles: Iterable[FlowFile]) -> List[float]:
    out = []
    for ff in flowfiles:
        v = ff.get_attribute(CONCATENATED_STRING_LENGTH)
        if v is not None:
            out.append(float(v))
    return out


def build_local(cfg: Dict[str, Any]) -> Dict[str, Any]:
    run = cfg.get("run") or {}
    run_id = run.get("run_id") or "run"
    out_dir = run.get("out_dir") or "storage"
    batch_units = int(run.get("batch_units", 1000))
    log_every = max(1, int(run.get("log_every_units", 1000)))
    show_progress = bool(run.get("progress", False))
    out_format = (cfg.get("output") or {}).get("format", "jsonl")

    if batch_units <= 0:
        raise ConfigurationError(f"run.batch_units must be positive, got {batch_units}")
    if "processor" not in cfg:
        raise ConfigurationError("missing 'processor' section")

    start_time_ms = int(time.time() * 1000)
    os.makedirs(os.path.join(out_dir, "relationships"), exist_ok=True)
    os.makedirs(os.path.join(out_dir, "manifests"), exist_ok=True)

    processor, properties = make_processor(cfg["processor"])
    writer = get_writer(out_format)
    sink = AnalyticsSink(out_dir=out_dir, run_id=run_id)
    rel_names = sorted(r.name for r in processor.relationships)

    totals = {name: 0 for name in rel_names}
    per_source: Dict[str, Dict[str, Any]] = {}

    with scheduled(processor, properties) as context:
        for s_cfg in cfg.get("sources") or []:
            spec = SourceSpec(**s_cfg)
            src = make_source(spec)
            log.info(f"Starting source={spec.name} kind={spec.kind} meta={src.metadata()}")

            s_counts = {"input_units": 0, **{name: 0 for name in rel_names}}
            shard_idx = {name: 0 for name in rel_names}
            stream = tqdm(src.stream(), desc=spec.name, unit="ff", disable=not show_progress)

            for batch in _batches(stream, batch_units):
                queue = FlowFileQueue(batch)
                transfers = drain(processor, context, queue)
                s_counts["input_units"] += len(batch)

                routed = {name: len(transfers.get(name, [])) for name in rel_names}
                for rel, ffs in transfers.items():
                    if not ffs:
                        continue
                    path = writer.write_shard(
                        ffs, out_dir=out_dir, relationship=rel, source=spec.name, shard_idx=shard_idx[rel]
                    )
                    shard_idx[rel] += 1
                    s_counts[rel] += len(ffs)
                    totals[rel] += len(ffs)
                    log.debug(f"wrote {len(ffs)} flowfiles to {path}")

                sink.emit(make_event(
                    run_id=run_id,
                    stage=processor.name,
                    source=spec.name,
                    counts={"input_units": len(batch)},
                    routed=routed,
                    metric_samples={"concatenated_length": _length_samples(transfers.get("success", []))},
                ))

                if s_counts["input_units"] % log_every < len(batch):
                    log.info(f"source={spec.name} processed={s_counts['input_units']} routed={routed}")

            sink.flush_aggregates()
            if s_counts["input_units"] == 0:
                log.warning(f"Source {spec.name}: no flowfiles were read. Check the dataset path.")
            per_source[spec.name] = s_counts
            log.info(f"Source {spec.name} complete: {s_counts}")

    manifest = {
        "run_id": run_id,
        "processor": processor.name,
        "properties": dict(properties),
        "start_time_ms": start_time_ms,
        "end_time_ms": int(time.time() * 1000),
        "total_input_units": sum(s["input_units"] for s in per_source.values()),
        "routed": totals,
        "sources": per_source,
        "outputs": {
            "relationships_dir": os.path.join(out_dir, "relationships"),
            "analytics_events": sink.events_dir,
            "analytics_aggregates": sink.aggs_dir,
        },
    }
    manifest_path = os.path.join(out_dir, "manifests", f"{run_id}.json")
    write_manifest(manifest_path, manifest)
    log.info(f"Build complete. routed={totals} manifest={manifest_path}")
    return manifest
