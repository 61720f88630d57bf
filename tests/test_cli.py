"""
Tests for the CLI entry point and config helpers.
"""

import json

import pytest
import yaml

import concat_text.cli as cli
from concat_text.errors import ConfigurationError
from concat_text.policies.loader import load_yaml
from concat_text.run_id import resolve_out_dir, resolve_run_id


class TestProcessCommand:
    def test_hello_world(self, capsys):
        assert cli.main(["process", "--value", "World", "--delimiter", " ", "Hello"]) == 0
        out = json.loads(capsys.readouterr().out)
        ff = out["success"][0]
        assert ff["content"] == "Hello World"
        assert ff["attributes"]["concatenated.string.length"] == "11"

    def test_no_delimiter(self, capsys):
        assert cli.main(["process", "--value", "X", ""]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["success"][0]["content"] == "X"
        assert "concat.delimiter" not in out["success"][0]["attributes"]

    def test_empty_value_is_config_error(self, capsys):
        assert cli.main(["process", "--value", "", "Hello"]) == 2
        assert "must not be empty" in capsys.readouterr().err

    def test_unencodable_value_exits_nonzero(self, capsys):
        assert cli.main(["process", "--value", "é", "--charset", "ascii", "abc"]) == 1
        out = json.loads(capsys.readouterr().out)
        assert "failure" in out

    def test_unencodable_input_is_error(self, capsys):
        assert cli.main(["process", "--value", "World", "--charset", "ascii", "café"]) == 2
        captured = capsys.readouterr()
        assert "cannot encode input as ascii" in captured.err
        assert captured.out == ""

    def test_non_text_codec_is_config_error(self, capsys):
        assert cli.main(["process", "--value", "World", "--charset", "hex", "Hello"]) == 2
        assert "unknown character set" in capsys.readouterr().err


class TestDescribeCommand:
    def test_describe(self, capsys):
        assert cli.main(["describe"]) == 0
        out = capsys.readouterr().out
        assert "tags: concat, text, append" in out
        assert "Relationships" in out


class TestRunCommand:
    def test_run(self, tmp_path, write_jsonl, monkeypatch, capsys):
        monkeypatch.setattr(cli, "setup_logging", lambda **kw: None)
        data = write_jsonl("in.jsonl", [{"content": "Hello", "attributes": {"concat.delimiter": " "}}])
        config = tmp_path / "flow.yaml"
        config.write_text(yaml.safe_dump({
            "run": {"run_id": "cli-run", "out_dir": str(tmp_path / "out" / "{run_id}")},
            "processor": {"type": "concat_text", "properties": {"CONCAT_PROPERTY": "World"}},
            "sources": [{"name": "demo", "kind": "local_jsonl", "dataset": str(data)}],
        }), encoding="utf-8")

        assert cli.main(["run", "--config", str(config)]) == 0
        result = json.loads(capsys.readouterr().out)
        assert result == {"run_id": "cli-run", "routed": {"failure": 0, "success": 1}}
        assert (tmp_path / "out" / "cli-run" / "manifests" / "cli-run.json").exists()


class TestConfigHelpers:
    def test_load_yaml_requires_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_yaml(str(path))

    def test_load_yaml_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_yaml(str(path)) == {}

    def test_run_id_explicit(self):
        assert resolve_run_id({"run": {"run_id": " abc "}}) == "abc"

    def test_run_id_auto(self):
        rid = resolve_run_id({
            "run": {"run_id_auto": {"prefix_digits": 4, "suffix_digits": 0}},
            "sources": [{"name": "my source"}],
        })
        year = rid.rsplit("_", 1)[1]
        assert rid.startswith("my_source_")
        assert len(year) == 4 and year.isdigit()

    def test_run_id_default(self):
        assert resolve_run_id({}) == "run"

    def test_out_dir_placeholder(self):
        assert resolve_out_dir({"run": {"out_dir": "storage/{run_id}"}}, "r1") == "storage/r1"
        assert resolve_out_dir({}, "r1") == "storage"
