"""
Shared pytest fixtures.

The src/ directory is put on the path so the suite also runs from a plain
checkout without `pip install -e .`.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from concat_text.pipeline.context import FlowFile  # noqa: E402
from concat_text.stages.concat_text import CONCAT_DELIMITER, ConcatText  # noqa: E402


@pytest.fixture
def processor():
    return ConcatText()


@pytest.fixture
def make_flowfile():
    def _make(text="", delimiter=None, charset="utf-8", **attrs):
        if delimiter is not None:
            attrs[CONCAT_DELIMITER] = delimiter
        return FlowFile(content=text.encode(charset), attributes=attrs)
    return _make


@pytest.fixture
def write_jsonl(tmp_path):
    import json

    def _write(name, rows):
        path = tmp_path / name
        with open(path, "w", encoding="utf-8") as f:
            for r in rows:
                f.write(r if isinstance(r, str) else json.dumps(r, ensure_ascii=False))
                f.write("\n")
        return path
    return _write
