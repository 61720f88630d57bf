"""
End-to-end tests for the local host runner.
"""

import glob
import json
import os

import pyarrow.parquet as pq
import pytest

from concat_text.errors import ConfigurationError
from concat_text.pipeline.build import build_local, run_processor
from concat_text.pipeline.context import CONCAT_ERROR, FlowFile
from concat_text.stages.base import Processor
from concat_text.stages import concat_text as concat_stage
from concat_text.stages.concat_text import FAILURE, SUCCESS


def _cfg(tmp_path, dataset, **overrides):
    cfg = {
        "run": {"run_id": "t1", "out_dir": str(tmp_path / "out"), "batch_units": 2},
        "processor": {"type": "concat_text", "properties": {"CONCAT_PROPERTY": "World"}},
        "sources": [{"name": "demo", "kind": "local_jsonl", "dataset": str(dataset)}],
        "output": {"format": "jsonl"},
    }
    for k, v in overrides.items():
        cfg[k] = v
    return cfg


def _read_shards(out_dir, relationship, ext="jsonl"):
    pattern = os.path.join(out_dir, "relationships", f"relationship={relationship}", "source=demo", f"shard_*.{ext}")
    rows = []
    for path in sorted(glob.glob(pattern)):
        with open(path, encoding="utf-8") as f:
            rows.extend(json.loads(line) for line in f)
    return rows


class TestBuildLocal:
    def test_jsonl_run(self, tmp_path, write_jsonl):
        data = write_jsonl("in.jsonl", [
            {"content": "Hello", "attributes": {"concat.delimiter": " "}},
            {"content": ""},
            {"content": "A", "attributes": {"concat.delimiter": ","}},
        ])
        cfg = _cfg(tmp_path, data)
        cfg["processor"]["properties"]["CONCAT_PROPERTY"] = "B,C"
        manifest = build_local(cfg)

        assert manifest["routed"] == {"failure": 0, "success": 3}
        assert manifest["total_input_units"] == 3
        out_dir = cfg["run"]["out_dir"]
        rows = _read_shards(out_dir, "success")
        assert [r["content"] for r in rows] == ["Hello B,C", "B,C", "A,B,C"]
        assert [r["attributes"]["concatenated.string.length"] for r in rows] == ["9", "3", "5"]
        # batch_units=2 -> two shards
        assert manifest["sources"]["demo"] == {"input_units": 3, "failure": 0, "success": 3}
        assert os.path.exists(os.path.join(out_dir, "manifests", "t1.json"))

    def test_analytics_written(self, tmp_path, write_jsonl):
        data = write_jsonl("in.jsonl", [{"content": "x"}, {"content": "yy"}, {"content": "zzz"}])
        cfg = _cfg(tmp_path, data)
        build_local(cfg)
        out_dir = cfg["run"]["out_dir"]
        events = glob.glob(os.path.join(out_dir, "analytics", "events", "stage=concat_text", "date=*", "events.parquet"))
        assert len(events) == 1
        rows = pq.read_table(events[0]).to_pylist()
        assert [r["routed"]["success"] for r in rows] == [2, 1]
        aggs = pq.read_table(os.path.join(out_dir, "analytics", "aggregates", "daily_aggregates.parquet")).to_pylist()
        assert aggs[0]["input_units"] == 3
        assert aggs[0]["routed_success"] == 3
        assert "concatenated_length_p50" in aggs[0]

    def test_failure_route_with_charset(self, tmp_path, write_jsonl):
        data = write_jsonl("in.jsonl", [{"content": "café"}, {"content": "cafe"}])
        cfg = _cfg(tmp_path, data)
        cfg["processor"]["properties"]["CHARACTER_SET"] = "ascii"
        manifest = build_local(cfg)
        assert manifest["routed"] == {"failure": 1, "success": 1}
        failed = _read_shards(cfg["run"]["out_dir"], "failure")
        assert failed[0]["content"] == "café"
        assert "concat.error" in failed[0]["attributes"]

    def test_parquet_output(self, tmp_path, write_jsonl):
        data = write_jsonl("in.jsonl", [{"content": "Hello", "attributes": {"concat.delimiter": " "}}])
        cfg = _cfg(tmp_path, data, output={"format": "parquet"})
        build_local(cfg)
        paths = glob.glob(os.path.join(cfg["run"]["out_dir"], "relationships", "relationship=success", "source=demo", "*.parquet"))
        rows = pq.read_table(paths[0]).to_pylist()
        assert rows[0]["content"] == b"Hello World"
        assert dict(rows[0]["attributes"])["concatenated.string.length"] == "11"

    def test_invalid_properties_abort_before_output(self, tmp_path, write_jsonl):
        data = write_jsonl("in.jsonl", [{"content": "x"}])
        cfg = _cfg(tmp_path, data)
        cfg["processor"]["properties"]["CONCAT_PROPERTY"] = ""
        with pytest.raises(ConfigurationError):
            build_local(cfg)
        assert not os.path.exists(os.path.join(cfg["run"]["out_dir"], "manifests", "t1.json"))

    def test_missing_processor_section(self, tmp_path):
        with pytest.raises(ConfigurationError, match="processor"):
            build_local({"run": {"out_dir": str(tmp_path)}})


class _Exploding(Processor):
    name = "exploding"
    relationship_set = frozenset({SUCCESS, FAILURE})

    def on_trigger(self, context, session):
        ff = session.get()
        if ff is None:
            return
        session.write(ff, b"half-done")
        raise RuntimeError("boom")


class _ExplodingNoFailure(_Exploding):
    name = "exploding_strict"
    relationship_set = frozenset({SUCCESS})


class TestTriggerErrors:
    def test_exception_rolls_back_to_failure(self):
        ffs = [FlowFile(content=b"a"), FlowFile(content=b"b")]
        transfers = run_processor(_Exploding(), ffs, {})
        assert list(transfers) == ["failure"]
        assert [f.content for f in transfers["failure"]] == [b"a", b"b"]
        assert all(f.attributes["concat.error"] == "RuntimeError: boom" for f in transfers["failure"])

    def test_host_and_stage_share_error_attribute(self):
        assert concat_stage.CONCAT_ERROR is CONCAT_ERROR
        transfers = run_processor(_Exploding(), [FlowFile(content=b"a")], {})
        assert CONCAT_ERROR in transfers["failure"][0].attributes

    def test_exception_without_failure_relationship_propagates(self):
        with pytest.raises(RuntimeError, match="boom"):
            run_processor(_ExplodingNoFailure(), [FlowFile(content=b"a")], {})
