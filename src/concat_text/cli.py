"""CLI entrypoint.

Commands:
- `concat-text run --config configs/flow.yaml`
- `concat-text describe [--processor concat_text]`
- `concat-text process --value V [--delimiter D] [--charset C] TEXT`

`run` drives the configured processor over every source and writes routed
flowfiles under `<out_dir>/relationships`. `process` pushes a single
flowfile through the processor and prints the result as JSON.
"""

from __future__ import annotations
import argparse
import json
import sys
from typing import List, Optional
from rich.console import Console
from rich.table import Table

from .errors import ConcatTextError
from .logging_ import setup_logging
from .pipeline.build import build_local, run_processor
from .pipeline.context import FlowFile
from .policies.loader import load_yaml
from .run_id import resolve_run_id, resolve_out_dir
from .stages.concat_text import CHARACTER_SET, CONCAT_DELIMITER, CONCAT_PROPERTY, ConcatText
from .stages.registry import get_processor_class, list_processors


def _describe(name: str, console: Console) -> None:
    info = get_processor_class(name)().describe()
    console.print(f"[bold]{info['name']}[/bold]  {info['description']}")
    console.print(f"tags: {', '.join(info['tags'])}")

    props = Table(title="Properties")
    for col in ("name", "display name", "required", "default", "description"):
        props.add_column(col)
    for p in info["properties"]:
        props.add_row(p["name"], p["display_name"], str(p["required"]), p["default"] or "", p["description"])
    console.print(props)

    rels = Table(title="Relationships")
    rels.add_column("name")
    rels.add_column("description")
    for r in info["relationships"]:
        rels.add_row(r["name"], r["description"])
    console.print(rels)

    attrs = Table(title="Attributes")
    attrs.add_column("attribute")
    attrs.add_column("access")
    attrs.add_column("description")
    for k, v in info["reads_attributes"].items():
        attrs.add_row(k, "reads", v)
    for k, v in info["writes_attributes"].items():
        attrs.add_row(k, "writes", v)
    console.print(attrs)


def _process(args: argparse.Namespace) -> int:
    properties = {CONCAT_PROPERTY.name: args.value}
    if args.charset:
        properties[CHARACTER_SET.name] = args.charset
    processor = ConcatText()
    # fail on bad properties before the text is encoded with them
    charset = processor.init(properties).get_property(CHARACTER_SET)
    attrs = {}
    if args.delimiter is not None:
        attrs[CONCAT_DELIMITER] = args.delimiter

    try:
        content = args.text.encode(charset)
    except UnicodeEncodeError as e:
        print(f"concat-text: error: cannot encode input as {charset}: {e}", file=sys.stderr)
        return 2
    ff = FlowFile(content=content, attributes=attrs)
    transfers = run_processor(processor, [ff], properties)
    out = {
        rel: [f.to_dict(charset) for f in ffs]
        for rel, ffs in sorted(transfers.items())
    }
    print(json.dumps(out, ensure_ascii=False, indent=2))
    return 0 if transfers.get("success") else 1


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="concat-text")
    sub = p.add_subparsers(dest="cmd", required=True)

    pr = sub.add_parser("run", help="Run the configured processor over all sources")
    pr.add_argument("--config", required=True)

    pd = sub.add_parser("describe", help="Show a processor's properties, relationships and attributes")
    pd.add_argument("--processor", default=ConcatText.name, choices=list_processors())

    pp = sub.add_parser("process", help="Run one flowfile through ConcatText and print the result")
    pp.add_argument("text", help="Incoming flowfile content")
    pp.add_argument("--value", required=True, help="Concatenation Value")
    pp.add_argument("--delimiter", default=None, help="Value of the concat.delimiter attribute")
    pp.add_argument("--charset", default=None, help="Character Set (default UTF-8)")

    args = p.parse_args(argv)

    try:
        if args.cmd == "describe":
            _describe(args.processor, Console())
            return 0

        if args.cmd == "process":
            return _process(args)

        cfg = load_yaml(args.config)
        run_id = resolve_run_id(cfg)
        out_dir = resolve_out_dir(cfg, run_id)
        cfg.setdefault("run", {})
        cfg["run"]["run_id"] = run_id
        cfg["run"]["out_dir"] = out_dir
        setup_logging(out_dir=out_dir, run_id=run_id, level=cfg["run"].get("log_level", "INFO"))
        manifest = build_local(cfg)
        print(json.dumps({"run_id": run_id, "routed": manifest["routed"]}))
        return 0
    except ConcatTextError as e:
        print(f"concat-text: error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
