"""Tests for on-demand input resolution.

These tests verify:
- Passive producers are computed once and memoized
- Active producers resolve to ABSENT until they have run
- Event producers only return what the listener published
- Failures resolve to ABSENT instead of raising
"""

from __future__ import annotations

import pytest

from cardforge.catalog import make_node
from cardforge.config import RuntimeOptions
from cardforge.domain.models import Edge, Endpoint, EventSnapshot, Graph, Node
from cardforge.execution.engine import RunContext
from cardforge.execution.ports import ABSENT
from cardforge.host import HeadlessHost, collecting_log
from cardforge.registry import NodeBehavior, NodeTypeRegistry


def _edge(edge_id: str, src: str, src_port: str, dst: str, dst_port: str, kind: str = "data") -> Edge:
    return Edge(
        id=edge_id,
        kind=kind,
        source=Endpoint(node_id=src, port_id=src_port),
        target=Endpoint(node_id=dst, port_id=dst_port),
    )


def _context(graph: Graph, **options) -> tuple[RunContext, HeadlessHost, list]:
    host = HeadlessHost(time_scale=0)
    entries, log = collecting_log()
    ctx = RunContext(graph=graph, options=RuntimeOptions(backend=host, events=host, log=log, **options))
    return ctx, host, entries


class TestPassiveProducers:
    """Test constants and the UI root."""

    @pytest.mark.asyncio
    async def test_unwired_input_is_absent(self):
        graph = Graph(nodes=[make_node("debug.log", "log")])
        ctx, _, _ = _context(graph)
        assert await ctx.resolver.resolve_input(graph.nodes[0], "data_in") is ABSENT

    @pytest.mark.asyncio
    async def test_constant_memoized_across_consumers(self):
        graph = Graph(
            nodes=[
                make_node("data.constString", "const", value="hi"),
                make_node("debug.log", "log1"),
                make_node("debug.log", "log2"),
            ],
            edges=[
                _edge("e1", "const", "data_out", "log1", "data_in"),
                _edge("e2", "const", "data_out", "log2", "data_in"),
            ],
        )
        ctx, _, _ = _context(graph)

        first = await ctx.resolver.resolve_input(graph.find_node("log1"), "data_in")
        second = await ctx.resolver.resolve_input(graph.find_node("log2"), "data_in")

        assert first == second == "hi"
        assert ctx.cache.writes == 1
        assert ctx.cache.get_value("const", "data_out") == "hi"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("config_value,expected", [(12, 12), ("12.5", 12.5), ("abc", 0), (None, 0)])
    async def test_const_number_coercion(self, config_value, expected):
        graph = Graph(
            nodes=[make_node("data.constNumber", "num", value=config_value), make_node("debug.log", "log")],
            edges=[_edge("e1", "num", "data_out", "log", "data_in")],
        )
        ctx, _, _ = _context(graph)
        assert await ctx.resolver.resolve_input(graph.find_node("log"), "data_in") == expected

    @pytest.mark.asyncio
    async def test_falsy_constant_is_a_value(self):
        graph = Graph(
            nodes=[make_node("data.constString", "const", value=""), make_node("debug.log", "log")],
            edges=[_edge("e1", "const", "data_out", "log", "data_in")],
        )
        ctx, _, _ = _context(graph)
        assert await ctx.resolver.resolve_input(graph.find_node("log"), "data_in") == ""

    @pytest.mark.asyncio
    async def test_ui_root_resolves_mount(self):
        graph = Graph(
            nodes=[make_node("tool.uiRoot", "root", mountId="stage"), make_node("ui.spawnEmoji", "spawn")],
            edges=[_edge("e1", "root", "tool_out", "spawn", "tool_in", kind="tool")],
        )
        ctx, host, _ = _context(graph)

        mount = await ctx.resolver.resolve_input(graph.find_node("spawn"), "tool_in")

        assert mount is host.mounts["stage"]

    @pytest.mark.asyncio
    async def test_ui_root_defaults_to_options_mount(self):
        root = Node(id="root", type="tool.uiRoot", config={}, ports=make_node("tool.uiRoot", "x").ports)
        graph = Graph(
            nodes=[root, make_node("ui.spawnEmoji", "spawn")],
            edges=[_edge("e1", "root", "tool_out", "spawn", "tool_in", kind="tool")],
        )
        ctx, host, _ = _context(graph, mount_id="caller-mount")

        mount = await ctx.resolver.resolve_input(graph.find_node("spawn"), "tool_in")

        assert mount is host.mounts["caller-mount"]


class TestActiveAndEventProducers:
    @pytest.fixture
    def graph(self):
        return Graph(
            nodes=[
                make_node("event.uiHover", "hover"),
                make_node("ui.spawnEmoji", "spawn"),
                make_node("ui.animateFly", "fly"),
            ],
            edges=[
                _edge("e1", "spawn", "data_out_el", "fly", "data_in_el"),
                _edge("e2", "hover", "data_out_event", "spawn", "data_in_event"),
            ],
        )

    @pytest.mark.asyncio
    async def test_active_producer_absent_before_it_runs(self, graph):
        ctx, _, _ = _context(graph)

        assert await ctx.resolver.resolve_input(graph.find_node("fly"), "data_in_el") is ABSENT
        assert ctx.cache.writes == 0

    @pytest.mark.asyncio
    async def test_active_producer_value_after_publish(self, graph):
        ctx, _, _ = _context(graph)
        ctx.cache.set_value("spawn", "data_out_el", "handle-1")

        assert await ctx.resolver.resolve_input(graph.find_node("fly"), "data_in_el") == "handle-1"

    @pytest.mark.asyncio
    async def test_event_producer_before_and_after_firing(self, graph):
        ctx, _, _ = _context(graph)
        spawn = graph.find_node("spawn")

        assert await ctx.resolver.resolve_input(spawn, "data_in_event") is ABSENT

        snapshot = EventSnapshot(event_class="mouseover", x=1, y=2, timestamp=3)
        ctx.cache.set_value("hover", "data_out_event", snapshot)

        assert await ctx.resolver.resolve_input(spawn, "data_in_event") is snapshot

    @pytest.mark.asyncio
    async def test_data_cycle_resolves_absent(self):
        graph = Graph(
            nodes=[make_node("logic.eval", "a"), make_node("logic.eval", "b")],
            edges=[
                _edge("e1", "a", "data_out", "b", "data_in"),
                _edge("e2", "b", "data_out", "a", "data_in"),
            ],
        )
        ctx, _, _ = _context(graph)

        assert await ctx.resolver.resolve_input(graph.find_node("a"), "data_in") is ABSENT
        assert await ctx.resolver.resolve_input(graph.find_node("b"), "data_in") is ABSENT


class TestResolutionFailures:
    @pytest.mark.asyncio
    async def test_unknown_producer_node(self):
        graph = Graph(
            nodes=[make_node("debug.log", "log")],
            edges=[_edge("e1", "ghost", "data_out", "log", "data_in")],
        )
        ctx, _, _ = _context(graph)
        assert await ctx.resolver.resolve_input(graph.nodes[0], "data_in") is ABSENT

    @pytest.mark.asyncio
    async def test_passive_producer_error_is_absent(self):
        class Broken(NodeBehavior):
            producer = "passive"
            executable = False

            async def produce(self, node, ctx, port_id):
                raise RuntimeError("no mount")

        registry = NodeTypeRegistry()
        registry.register("test.broken", Broken())
        graph = Graph(
            nodes=[Node(id="src", type="test.broken"), Node(id="dst", type="test.sink")],
            edges=[_edge("e1", "src", "out", "dst", "in")],
        )
        ctx, _, entries = _context(graph)
        ctx.registry = registry

        assert await ctx.resolver.resolve_input(graph.find_node("dst"), "in") is ABSENT
        assert ctx.cache.writes == 0
        assert entries[0][0] == "Could not resolve src.out"
        assert "RuntimeError: no mount" in entries[0][1]["error"]
