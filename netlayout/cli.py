"""Command-line interface for netlayout."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections import Counter
from contextlib import nullcontext
from pathlib import Path
from time import perf_counter
from typing import Any, Dict, List, Optional

from netlayout.dsl.loader import load_document_file
from netlayout.export.xyflow import to_xyflow
from netlayout.layout.overrides import overrides_summary
from netlayout.layout.synthesizer import synthesize
from netlayout.layout.topology import SubnetTopology, resolve_topology
from netlayout.logging import get_logger, redirect_log_stream, set_global_log_level
from netlayout.model.diagram import Diagram, EdgeCategory, NodeKind

logger = get_logger(__name__)

FORMATS = ("contract", "xyflow")


def _format_table(
    headers: List[str],
    rows: List[List[str]],
    min_width: int = 8,
    max_col_width: Optional[int] = None,
) -> str:
    """Format data as a simple ASCII table.

    Args:
        headers: Column headers
        rows: Data rows
        min_width: Minimum column width
        max_col_width: Cells longer than this are clipped with "..."

    Returns:
        Formatted table string, or "" when there are no rows
    """
    if not rows:
        return ""

    def clip(val: Any) -> str:
        s = str(val)
        if max_col_width is not None and len(s) > max_col_width:
            return s[: max_col_width - 3] + "..."
        return s

    clipped_headers = [clip(h) for h in headers]
    clipped_rows = [[clip(item) for item in row] for row in rows]

    all_data = [clipped_headers] + clipped_rows
    col_widths = []
    for col_idx in range(len(clipped_headers)):
        max_width = max(len(str(row[col_idx])) for row in all_data)
        col_widths.append(max(max_width, min_width))

    def format_row(row_data: List[str]) -> str:
        return "   " + " | ".join(
            f"{str(item):<{col_widths[i]}}" for i, item in enumerate(row_data)
        )

    lines = [format_row(clipped_headers)]
    lines.append("   " + "-+-".join("-" * width for width in col_widths))
    for row in clipped_rows:
        lines.append(format_row(row))
    return "\n".join(lines)


def _format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    return f"{seconds:.2f} s"


def _indent(text: str, prefix: str = "   ") -> str:
    return "\n".join(f"{prefix}{line}" for line in text.split("\n"))


def _subnet_tree_lines(topology: SubnetTopology) -> List[str]:
    lines: List[str] = []

    def walk(name: str, depth: int) -> None:
        count = topology.device_counts.get(name, 0)
        lines.append(f"{'  ' * depth}- {name} ({count} device slot{'s' if count != 1 else ''})")
        for child in topology.children_of.get(name, []):
            walk(child, depth + 1)

    for root in topology.roots:
        walk(root, 0)
    return lines


def _print_counts(diagram: Diagram) -> None:
    node_counts = Counter(n.kind for n in diagram.nodes)
    edge_counts = Counter(e.category for e in diagram.edges)

    print("\n2. NODES")
    print("-" * 30)
    print(f"   Total: {len(diagram.nodes)}")
    rows = [[kind.value, str(node_counts.get(kind, 0))] for kind in NodeKind]
    print(_format_table(["Kind", "Count"], rows))

    print("\n3. EDGES")
    print("-" * 30)
    print(f"   Total: {len(diagram.edges)}")
    rows = [[cat.value, str(edge_counts.get(cat, 0))] for cat in EdgeCategory]
    print(_format_table(["Category", "Count"], rows))


def _print_containers(diagram: Diagram) -> None:
    print("\n   Containers:")
    rows = []
    for node in diagram.nodes:
        if node.kind not in (NodeKind.BACKBONE_GROUP, NodeKind.NETWORK_CONTAINER):
            continue
        size = node.size
        rows.append(
            [
                node.id,
                node.kind.value,
                str(node.data.get("level", "-")),
                f"{size.width:.0f}" if size else "-",
                f"{size.height:.0f}" if size else "-",
                node.parent_container_id or "-",
            ]
        )
    table = _format_table(["Id", "Kind", "Level", "Width", "Height", "Parent"], rows)
    print(table if table else "   (none)")


def _inspect_declaration(path: Path, detail: bool = False) -> None:
    """Validate a declaration file and summarize the diagram it produces.

    Args:
        path: Declaration YAML file.
        detail: Whether to also print container sizes and the subnet tree.
    """
    logger.info(f"Inspecting declaration from: {path}")
    _start_time = perf_counter()

    try:
        declaration, overrides = load_document_file(path)
        logger.info("✓ Declaration loaded and validated")
        topology = resolve_topology(declaration.private)
        diagram = synthesize(declaration, overrides=overrides)

        print("\n" + "=" * 60)
        print("NETLAYOUT DECLARATION INSPECTION")
        print("=" * 60)

        print("\n1. OVERVIEW")
        print("-" * 30)
        overview = [
            ["Backbone groups", str(len(declaration.backbone_groups))],
            ["Private networks", str(len(declaration.private))],
            ["Root networks", str(len(topology.roots))],
            ["Subnets", str(len(topology.parent_of))],
            ["Subnet depth", str(max((topology.depth(r) for r in topology.roots), default=0))],
        ]
        override_counts = overrides_summary(overrides)
        active = {k: v for k, v in override_counts.items() if v}
        overview.append(
            [
                "Overrides",
                ", ".join(f"{k}={v}" for k, v in active.items()) if active else "none",
            ]
        )
        print(_format_table(["Item", "Value"], overview))

        _print_counts(diagram)

        if detail:
            _print_containers(diagram)
            print("\n   Subnet tree:")
            tree = _subnet_tree_lines(topology)
            print(_indent("\n".join(tree), "     ") if tree else "     (no private networks)")

        print("\n" + "=" * 60)
        print("INSPECTION COMPLETE")
        print("=" * 60)
        print(f"Usage: python -m netlayout render {path}")

        _elapsed = perf_counter() - _start_time
        logger.info(f"Declaration inspection completed in {_format_duration(_elapsed)}")
    except FileNotFoundError:
        print(f"❌ ERROR: Declaration file not found: {path}")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Failed to inspect declaration: {e}")
        print("❌ ERROR: Failed to inspect declaration")
        print(f"  {type(e).__name__}: {e}")
        sys.exit(1)


def _render_declaration(
    path: Path,
    output: Optional[Path],
    fmt: str,
    stdout: bool,
) -> None:
    """Synthesize a declaration and write the diagram as JSON.

    Args:
        path: Declaration YAML file.
        output: Destination file. Defaults to ``<stem>.diagram.json`` in the
            current directory.
        fmt: ``contract`` for the neutral form, ``xyflow`` for the canvas form.
        stdout: Whether to also print the JSON. Status lines and logs then go
            to stderr.
    """
    logger.info(f"Loading declaration from: {path}")
    _start_time = perf_counter()

    try:
        declaration, overrides = load_document_file(path)
        diagram = synthesize(declaration, overrides=overrides)

        payload: Dict[str, Any] = to_xyflow(diagram) if fmt == "xyflow" else diagram.to_dict()
        json_str = json.dumps(payload, indent=2, ensure_ascii=False)

        effective_output = output if output is not None else Path(f"{path.stem}.diagram.json")
        if effective_output.parent and not effective_output.parent.exists():
            effective_output.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Writing diagram to: {effective_output}")
        effective_output.write_text(json_str, encoding="utf-8")
        # With --stdout the JSON owns stdout
        print(
            f"✅ Diagram written to: {effective_output}",
            file=sys.stderr if stdout else sys.stdout,
        )
        if stdout:
            print(json_str)

        _elapsed = perf_counter() - _start_time
        logger.info(f"Render completed successfully in {_format_duration(_elapsed)}")
    except FileNotFoundError:
        logger.error(f"Declaration file not found: {path}")
        print(f"❌ ERROR: Declaration file not found: {path}")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Failed to render declaration: {type(e).__name__}: {e}")
        print(f"❌ ERROR: Failed to render declaration: {type(e).__name__}: {e}")
        sys.exit(1)


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``netlayout`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="netlayout",
        description="Lay out declared network topologies as diagrams.",
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Suppress informational logs"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{render,inspect}",
        help="Available commands",
    )

    render_parser = subparsers.add_parser("render", help="Render a declaration to JSON")
    render_parser.add_argument("declaration", type=Path, help="Path to declaration YAML")
    render_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output JSON file (default: <declaration_name>.diagram.json)",
    )
    render_parser.add_argument(
        "--format",
        "-f",
        choices=FORMATS,
        default="contract",
        help="Output dialect: neutral diagram contract or xyflow canvas nodes/edges",
    )
    render_parser.add_argument(
        "--stdout",
        action="store_true",
        help="Also print the JSON to stdout",
    )

    inspect_parser = subparsers.add_parser(
        "inspect", help="Validate a declaration and summarize its diagram"
    )
    inspect_parser.add_argument("declaration", type=Path, help="Path to declaration YAML")
    inspect_parser.add_argument(
        "--detail",
        "-d",
        action="store_true",
        help="Show container sizes and the subnet tree",
    )

    effective_args = sys.argv[1:] if argv is None else argv

    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
        logger.debug("Debug logging enabled")
    elif args.quiet:
        set_global_log_level(logging.WARNING)
    else:
        set_global_log_level(logging.INFO)

    if args.command == "render":
        with redirect_log_stream(sys.stderr) if args.stdout else nullcontext():
            _render_declaration(
                path=args.declaration,
                output=args.output,
                fmt=args.format,
                stdout=args.stdout,
            )
    elif args.command == "inspect":
        _inspect_declaration(args.declaration, args.detail)


if __name__ == "__main__":
    main()
