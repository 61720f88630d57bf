"""Example: Adding a new flowfile source without modifying registry.py.

Registers an in-memory source and runs ConcatText over it with the
local host runner.
"""

from concat_text.pipeline.build import build_local
from concat_text.pipeline.context import FlowFile
from concat_text.sources.base import FlowFileSource, SourceSpec
from concat_text.sources.registry import list_sources, register_source
from typing import Iterable

class GreetingSource(FlowFileSource):
    """Example source yielding a few greetings."""

    def __init__(self, spec: SourceSpec):
        self.spec = spec
        self.name = spec.name

    def stream(self) -> Iterable[FlowFile]:
        for text, delim in [("Hello", " "), ("Bonjour", ", "), ("Hallo", None)]:
            attrs = {"concat.delimiter": delim} if delim is not None else {}
            yield FlowFile(content=text.encode(self.spec.charset), attributes=attrs)

register_source("greetings", GreetingSource)

print("Registered sources:")
for kind, factory in list_sources().items():
    print(f"  {kind}: {factory}")

manifest = build_local({
    "run": {"run_id": "greetings_demo", "out_dir": "storage/greetings_demo"},
    "processor": {"type": "concat_text", "properties": {"CONCAT_PROPERTY": "World"}},
    "sources": [{"name": "greetings", "kind": "greetings", "dataset": ""}],
    "output": {"format": "jsonl"},
})
print(manifest["routed"])
