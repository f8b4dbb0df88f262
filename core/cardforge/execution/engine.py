"""Node dispatch and pulse propagation."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any

import cardforge.execution.behaviors  # noqa: F401  (registers built-in behaviors)
from cardforge.config import RuntimeOptions
from cardforge.domain.models import EventSnapshot, Graph, Node
from cardforge.execution.ports import ValueCache
from cardforge.execution.resolver import DataResolver
from cardforge.registry import NodeTypeRegistry, get_global_registry


@dataclass
class RunContext:
    """State belonging to one started engine instance.

    Shared by every pulse of the run; nothing here is locked.
    """

    graph: Graph
    options: RuntimeOptions
    registry: NodeTypeRegistry = field(default_factory=get_global_registry)
    cache: ValueCache = field(default_factory=ValueCache)
    last_event: EventSnapshot | None = None
    resolver: DataResolver = field(init=False)

    def __post_init__(self) -> None:
        self.resolver = DataResolver(self)

    @property
    def backend(self) -> Any:
        return self.options.backend

    def log(self, message: str, data: Any = None) -> None:
        """Forward an observation to the configured log sink."""
        sink = self.options.log
        if sink is None:
            return
        try:
            sink(message, data)
        except Exception as e:
            sys.stderr.write(f"[ENGINE] log sink raised {type(e).__name__}: {e}\n")
            sys.stderr.flush()


class ExecutionEngine:
    """Walks execution edges and runs node behaviors.

    A pulse from (node, port) visits the outgoing exec edges in declaration
    order and runs each target's whole downstream cascade before moving on to
    the next sibling. Nothing runs concurrently within a pulse; separate
    pulses interleave only where a behavior awaits.
    """

    def __init__(self, ctx: RunContext) -> None:
        self.ctx = ctx

    async def run_pulse(self, node_id: str, port_id: str) -> None:
        """Propagate a pulse from an execution-output port to completion."""
        edges = self.ctx.graph.exec_edges_from(node_id, port_id)
        if edges:
            sys.stderr.write(f"[PULSE] {node_id}.{port_id} → {[e.target.node_id for e in edges]}\n")
            sys.stderr.flush()
        for edge in edges:
            await self.execute_node(edge.target.node_id)

    async def execute_node(self, node_id: str) -> None:
        """Run one node's behavior, then continue along its own exec output."""
        ctx = self.ctx
        node = ctx.graph.find_node(node_id)
        if node is None:
            sys.stderr.write(f"[ENGINE] WARNING: Node {node_id} not found in graph\n")
            sys.stderr.flush()
            return

        if not ctx.registry.has_node_type(node.type):
            sys.stderr.write(f"[ENGINE] No behavior for {node.id} (type={node.type}), pulse ends here\n")
            sys.stderr.flush()
            ctx.log(f"Unknown node type: {node.type}", {"node": node.id})
            return

        behavior = ctx.registry.get(node.type)
        if not behavior.executable:
            return

        sys.stderr.write(f"[ENGINE] Executing node: {node.id} ({node.type})\n")
        sys.stderr.flush()
        await self._dispatch(node, behavior)
        await self.run_pulse(node.id, behavior.exec_out)

    async def _dispatch(self, node: Node, behavior: Any) -> None:
        ctx = self.ctx
        try:
            inputs = await behavior.consume(node, ctx)
            outputs = await behavior.effect(node, ctx, inputs)
            if outputs:
                behavior.publish(node, ctx, outputs)
        except Exception as e:
            error_msg = f"{type(e).__name__}: {e}"
            sys.stderr.write(f"[ENGINE] Node {node.id} failed: {error_msg}\n")
            sys.stderr.flush()
            ctx.log(f"Node {node.id} failed", {"type": node.type, "error": error_msg})
