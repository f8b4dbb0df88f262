"""On-demand resolution of input port values."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any

from cardforge.domain.models import Node
from cardforge.execution.ports import ABSENT

if TYPE_CHECKING:
    from cardforge.execution.engine import RunContext


class DataResolver:
    """Resolves an input port by following its incoming edge.

    Producers are treated according to their behavior's `producer` class:

    - passive: computed from config on first use and memoized in the cache
    - event: whatever the listener last published, or ABSENT
    - active: only a value already published by an earlier pulse step

    An active producer is never executed on demand. A node that needs one is
    only correct if the producer runs earlier along the execution path, and a
    cycle of data edges simply resolves to ABSENT.
    """

    def __init__(self, ctx: RunContext) -> None:
        self._ctx = ctx

    async def resolve_input(self, node: Node, port_id: str) -> Any:
        """Resolve `node.port_id`, returning ABSENT when there is no value."""
        ctx = self._ctx
        edge = ctx.graph.incoming_edge(node.id, port_id)
        if edge is None:
            return ABSENT

        source = edge.source
        existing = ctx.cache.get_value(source.node_id, source.port_id)
        if existing is not ABSENT:
            return existing

        producer = ctx.graph.find_node(source.node_id)
        if producer is None:
            sys.stderr.write(f"[RESOLVER] WARNING: edge {edge.id} starts at unknown node {source.node_id}\n")
            sys.stderr.flush()
            return ABSENT

        if not ctx.registry.has_node_type(producer.type):
            return ABSENT

        behavior = ctx.registry.get(producer.type)
        if behavior.producer != "passive":
            # Event producers are published by the listener; active ones by their pulse step.
            return ABSENT

        try:
            value = await behavior.produce(producer, ctx, source.port_id)
        except Exception as e:
            sys.stderr.write(f"[RESOLVER] ERROR producing {producer.id}.{source.port_id}: {e}\n")
            sys.stderr.flush()
            ctx.log(f"Could not resolve {producer.id}.{source.port_id}", {"error": f"{type(e).__name__}: {e}"})
            return ABSENT

        if value is not ABSENT:
            sys.stderr.write(f"[RESOLVER] Resolved {producer.id}.{source.port_id} → {type(value).__name__}\n")
            sys.stderr.flush()
            ctx.cache.set_value(producer.id, source.port_id, value)
        return value
