"""CardForge CLI - Command line interface for action graphs.

Usage:
    cardforge demo [--output FILE]
    cardforge list <graph_file>
    cardforge check <graph_file>
    cardforge run <graph_file> --fire SELECTOR [--fire SELECTOR]... [--at X,Y] [--time-scale F]
    cardforge --version
    cardforge --help

Examples:
    cardforge demo --output demo.graph.json
    cardforge check demo.graph.json
    cardforge run demo.graph.json --fire "#hoverTarget" --at 200,300 --time-scale 0
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from cardforge import __version__
from cardforge.config import RuntimeOptions
from cardforge.domain.models import Graph, Node
from cardforge.execution.listeners import start
from cardforge.host import HeadlessHost, collecting_log
from cardforge.registry import TriggerBehavior, get_global_registry
from cardforge.samples import make_hover_emoji_demo_graph
from cardforge.services.wiring import validate_graph


def load_graph(path: Path) -> Graph:
    """Read a graph JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If the JSON does not describe a graph
    """
    if not path.exists():
        raise FileNotFoundError(f"Graph file not found: {path}")
    return Graph.from_json(path.read_text(encoding="utf-8"))


def _load_or_report(file: str) -> Graph | None:
    try:
        return load_graph(Path(file))
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
    except (ValidationError, ValueError) as e:
        print(f"Error parsing file: {e}", file=sys.stderr)
    return None


def parse_position(value: str) -> tuple[float, float]:
    """Parse "X,Y" into a pair of floats."""
    try:
        x, y = (float(part) for part in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected X,Y but got: {value}") from None
    return (x, y)


def _format_data(data: Any) -> str:
    if data is None:
        return ""
    try:
        return " " + json.dumps(data, default=repr, ensure_ascii=False)
    except (TypeError, ValueError):
        return f" {data!r}"


def cmd_demo(args: argparse.Namespace) -> int:
    """Print or write the demo graph."""
    text = make_hover_emoji_demo_graph().to_json()
    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        print(f"Wrote {args.output}")
    else:
        print(text)
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """List nodes and edges of a graph file."""
    graph = _load_or_report(args.file)
    if graph is None:
        return 1

    print(f"Graph: {graph.name or graph.graph_id or args.file}")
    print()
    print(f"Nodes: {len(graph.nodes)}")
    for node in graph.nodes:
        print(f"  • {node.id} ({node.type})")
    print()
    print(f"Edges: {len(graph.edges)}")
    for edge in graph.edges:
        print(f"  • [{edge.kind}] {edge.source!r} → {edge.target!r}")
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Report wiring problems; exit code 1 when there are any."""
    graph = _load_or_report(args.file)
    if graph is None:
        return 1

    problems = validate_graph(graph)
    registry = get_global_registry()
    unknown = sorted({n.type for n in graph.nodes if not registry.has_node_type(n.type)})

    for problem in problems:
        print(f"✗ {problem.message}")
    for node_type in unknown:
        print(f"! No behavior for node type: {node_type}")
    if unknown:
        print(f"  Available types: {', '.join(registry.types())}")
    if problems:
        return 1
    print(f"✓ {len(graph.edges)} edge(s) OK")
    return 0


def _triggers(graph: Graph) -> list[tuple[Node, TriggerBehavior]]:
    registry = get_global_registry()
    found = []
    for node in graph.nodes:
        if registry.has_node_type(node.type):
            behavior = registry.get(node.type)
            if isinstance(behavior, TriggerBehavior):
                found.append((node, behavior))
    return found


async def run_graph(
    graph: Graph,
    fires: list[str],
    *,
    position: tuple[float, float] = (0.0, 0.0),
    time_scale: float = 1.0,
) -> list[tuple[str, Any]]:
    """Run `graph` against a headless host, firing each selector in turn.

    Every trigger selector in the graph is registered as a host target. Each
    firing's pulses are awaited before the next firing.

    Returns:
        The collected `(message, data)` log entries
    """
    host = HeadlessHost(time_scale=time_scale)
    event_classes: dict[str, str] = {}
    for node, behavior in _triggers(graph):
        selector = behavior.selector(node)
        host.add_target(selector)
        event_classes.setdefault(selector, behavior.event_class(node))

    entries, log = collecting_log()
    handle = start(graph, RuntimeOptions(backend=host, events=host, log=log))
    try:
        for selector in fires:
            fired = host.fire(selector, event_classes.get(selector, "mouseover"), x=position[0], y=position[1])
            if not fired:
                log(f"No listener for selector: {selector}", None)
            await handle.wait_idle()
    finally:
        handle.stop()
    return entries


def cmd_run(args: argparse.Namespace) -> int:
    """Run a graph headlessly and print the runtime log."""
    graph = _load_or_report(args.file)
    if graph is None:
        return 1
    if not args.fire:
        print("Error: nothing to fire (use --fire SELECTOR)", file=sys.stderr)
        return 1

    print(f"▶ Running: {args.file}")
    print(f"  Firing: {', '.join(args.fire)}")
    print()

    entries = asyncio.run(run_graph(graph, args.fire, position=args.at, time_scale=args.time_scale))

    print("─" * 70)
    for message, data in entries:
        print(f"{message}{_format_data(data)}")
    print("─" * 70)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="cardforge",
        description="CardForge - action graph runtime",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cardforge demo --output demo.graph.json
  cardforge list demo.graph.json
  cardforge run demo.graph.json --fire "#hoverTarget" --time-scale 0
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"cardforge {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    demo_parser = subparsers.add_parser("demo", help="Print the demo graph as JSON")
    demo_parser.add_argument("--output", help="Write to this file instead of stdout")

    list_parser = subparsers.add_parser("list", help="List nodes and edges in a graph file")
    list_parser.add_argument("file", help="Path to the graph JSON file")

    check_parser = subparsers.add_parser("check", help="Check the wiring of a graph file")
    check_parser.add_argument("file", help="Path to the graph JSON file")

    run_parser = subparsers.add_parser("run", help="Run a graph against a headless host")
    run_parser.add_argument("file", help="Path to the graph JSON file")
    run_parser.add_argument(
        "--fire",
        action="append",
        help="Trigger selector to fire (can be used multiple times)"
    )
    run_parser.add_argument(
        "--at",
        type=parse_position,
        default=(0.0, 0.0),
        help="Pointer position for fired events, as X,Y (default: 0,0)"
    )
    run_parser.add_argument(
        "--time-scale",
        type=float,
        default=1.0,
        help="Multiplier for animation durations (default: 1.0, 0 = instant)"
    )

    args = parser.parse_args(argv)

    if args.command == "demo":
        return cmd_demo(args)
    elif args.command == "list":
        return cmd_list(args)
    elif args.command == "check":
        return cmd_check(args)
    elif args.command == "run":
        return cmd_run(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
