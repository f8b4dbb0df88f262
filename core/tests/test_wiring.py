"""Tests for graph wiring.

These tests verify:
- Kind matching: only ports of the same kind can be connected
- Direction and unknown-port rejections
- Rejections are returned, never raised, and leave the graph unchanged
- validate_graph on already-built graphs
"""

from __future__ import annotations

import itertools

import pytest

from cardforge.catalog import make_node
from cardforge.domain.models import Edge, Endpoint, Graph, Node, Port
from cardforge.services.wiring import (
    ConnectionDirectionMismatch,
    ConnectionKindMismatch,
    EdgeKindMismatch,
    UnknownPort,
    add_link,
    remove_link,
    validate_graph,
)

KINDS = ["exec", "data", "tool", "resource", "error"]


def _kind_graph() -> Graph:
    src = Node(id="src", type="test", ports=[Port(id=f"{k}_out", kind=k, direction="out") for k in KINDS])
    dst = Node(id="dst", type="test", ports=[Port(id=f"{k}_in", kind=k, direction="in") for k in KINDS])
    return Graph(nodes=[src, dst])


class TestKindMatching:
    """Edges may only join ports of the same kind."""

    @pytest.mark.parametrize("out_kind,in_kind", list(itertools.product(KINDS, KINDS)))
    def test_kind_pairs(self, out_kind, in_kind):
        graph = _kind_graph()
        result = add_link(graph, "src", f"{out_kind}_out", "dst", f"{in_kind}_in")

        if out_kind == in_kind:
            assert result.success is True
            assert result.edge.kind == out_kind
            assert len(result.graph.edges) == 1
        else:
            assert result.success is False
            assert isinstance(result.error, ConnectionKindMismatch)
            assert result.error.source_kind == out_kind
            assert result.error.target_kind == in_kind
            assert result.graph is graph
            assert result.edge is None

    def test_mismatch_message(self):
        result = add_link(_kind_graph(), "src", "exec_out", "dst", "data_in")
        assert "kinds must match" in result.error.message


class TestAddLink:
    """Test add_link outcomes on catalog nodes."""

    @pytest.fixture
    def graph(self):
        return Graph(nodes=[
            make_node("event.uiHover", "hover"),
            make_node("ui.spawnEmoji", "spawn"),
            make_node("data.constString", "emoji"),
        ])

    def test_success_returns_new_graph(self, graph):
        result = add_link(graph, "hover", "exec_out", "spawn", "exec_in")

        assert result.success is True
        assert result.edge.id.startswith("edge_")
        assert result.edge.source.key == ("hover", "exec_out")
        assert graph.edges == []
        assert result.graph.edges == [result.edge]

    def test_explicit_edge_id(self, graph):
        result = add_link(graph, "emoji", "data_out", "spawn", "data_in_emoji", edge_id="e_custom")
        assert result.edge.id == "e_custom"

    def test_unknown_node(self, graph):
        result = add_link(graph, "nope", "exec_out", "spawn", "exec_in")
        assert isinstance(result.error, UnknownPort)
        assert result.error.missing == ("nope", "exec_out")

    def test_unknown_port(self, graph):
        result = add_link(graph, "hover", "exec_out", "spawn", "nope")
        assert isinstance(result.error, UnknownPort)
        assert result.error.missing == ("spawn", "nope")

    def test_direction_mismatch(self, graph):
        result = add_link(graph, "spawn", "exec_in", "hover", "exec_out")
        assert isinstance(result.error, ConnectionDirectionMismatch)

    def test_remove_link(self, graph):
        linked = add_link(graph, "hover", "exec_out", "spawn", "exec_in", edge_id="e1").graph
        assert remove_link(linked, "e1").edges == []
        assert len(linked.edges) == 1


class TestValidateGraph:
    def test_valid_demo_graph(self):
        from cardforge.samples import make_hover_emoji_demo_graph

        assert validate_graph(make_hover_emoji_demo_graph()) == []

    def test_reports_bad_edges(self):
        graph = Graph(
            nodes=[make_node("event.uiHover", "hover"), make_node("ui.spawnEmoji", "spawn")],
            edges=[
                Edge(
                    id="bad_kind",
                    kind="exec",
                    source=Endpoint(node_id="hover", port_id="exec_out"),
                    target=Endpoint(node_id="spawn", port_id="data_in_emoji"),
                ),
                Edge(
                    id="wrong_label",
                    kind="data",
                    source=Endpoint(node_id="hover", port_id="exec_out"),
                    target=Endpoint(node_id="spawn", port_id="exec_in"),
                ),
            ],
        )

        problems = validate_graph(graph)

        assert [type(p) for p in problems] == [ConnectionKindMismatch, EdgeKindMismatch]
        assert problems[0].edge_id == "bad_kind"
        assert problems[1].declared == "data"
        assert problems[1].actual == "exec"
