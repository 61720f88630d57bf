"""Local JSONL source.

Each line is a JSON object:
- content: text that becomes the flowfile content (encoded with spec.charset)
- attributes: optional mapping of string attributes
- id: optional, becomes the flowfile uuid

Supports a single file, a list of files, a directory (all .jsonl files,
recursively) or a glob pattern.
"""

from __future__ import annotations
import glob
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from ..pipeline.context import FlowFile
from .base import FlowFileSource, SourceSpec

log = logging.getLogger("concat_text.sources.local_jsonl")


class LocalJSONLSource(FlowFileSource):
    def __init__(self, spec: SourceSpec):
        self.spec = spec
        self.name = spec.name
        self.files = self._resolve_files(spec.dataset)

    def _resolve_files(self, dataset: Union[str, List[str]]) -> List[str]:
        if isinstance(dataset, list):
            files: List[str] = []
            for item in dataset:
                files.extend(self._resolve_files(item))
            return files

        dataset = str(dataset)
        if any(c in dataset for c in "*?["):
            matched = glob.glob(dataset, recursive=True)
            return sorted(f for f in matched if os.path.isfile(f) and f.endswith(".jsonl"))

        path = Path(dataset)
        if path.is_dir():
            return sorted(str(f) for f in path.glob("**/*.jsonl") if f.is_file())

        # single file; a missing one is reported when streamed
        return [dataset]

    def metadata(self) -> Dict[str, Any]:
        return {
            "kind": "local_jsonl",
            "files": self.files,
            "file_count": len(self.files),
            "total_size_bytes": sum(os.path.getsize(f) for f in self.files if os.path.exists(f)),
        }

    def _to_flowfile(self, ex: Dict[str, Any], file_path: str, line_num: int) -> FlowFile:
        text = ex.get(self.spec.content_field, "") or ""
        attrs = dict(self.spec.attributes)
        raw_attrs = ex.get(self.spec.attributes_field) or {}
        if not isinstance(raw_attrs, dict):
            raise ValueError(f"'{self.spec.attributes_field}' must be an object")
        attrs.update({str(k): str(v) for k, v in raw_attrs.items() if v is not None})
        attrs.setdefault("source.name", self.spec.name)
        attrs.setdefault("source.file", file_path)
        attrs.setdefault("source.line", str(line_num))
        kwargs: Dict[str, Any] = {}
        if ex.get("id") is not None:
            kwargs["uuid"] = str(ex["id"])
        return FlowFile(content=str(text).encode(self.spec.charset), attributes=attrs, **kwargs)

    def stream(self) -> Iterable[FlowFile]:
        """Stream flowfiles from all configured JSONL files."""
        for file_path in self.files:
            if not os.path.exists(file_path):
                log.warning(f"File not found: {file_path}, skipping")
                continue

            with open(file_path, "r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        ex = json.loads(line)
                        if not isinstance(ex, dict):
                            raise ValueError("line is not a JSON object")
                        yield self._to_flowfile(ex, file_path, line_num)
                    except (json.JSONDecodeError, ValueError) as e:
                        log.warning(f"Invalid record in {file_path}:{line_num}: {e}")
