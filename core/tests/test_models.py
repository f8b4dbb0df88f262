"""Tests for the graph domain models.

These tests verify:
- Adjacency lookups (exec edges out of a port, the edge into a port)
- JSON contract (from/to, nodeId/portId aliases)
- Event snapshot shape
"""

from __future__ import annotations

import json

from cardforge.domain.models import Edge, Endpoint, EventSnapshot, Graph, Node, Port


def _edge(edge_id: str, kind: str, src: str, src_port: str, dst: str, dst_port: str) -> Edge:
    return Edge(
        id=edge_id,
        kind=kind,
        source=Endpoint(node_id=src, port_id=src_port),
        target=Endpoint(node_id=dst, port_id=dst_port),
    )


def _graph() -> Graph:
    nodes = [Node(id=n, type="test.any") for n in ("a", "b", "c", "d")]
    edges = [
        _edge("e1", "exec", "a", "exec_out", "c", "exec_in"),
        _edge("e2", "data", "a", "exec_out", "d", "data_in"),
        _edge("e3", "exec", "a", "exec_out", "b", "exec_in"),
        _edge("e4", "exec", "a", "other_out", "d", "exec_in"),
        _edge("e5", "data", "a", "data_out", "b", "data_in"),
        _edge("e6", "data", "c", "data_out", "b", "data_in"),
    ]
    return Graph(nodes=nodes, edges=edges)


class TestAdjacency:
    """Test graph lookups used by the engine."""

    def test_exec_edges_in_declaration_order(self):
        edges = _graph().exec_edges_from("a", "exec_out")
        assert [e.id for e in edges] == ["e1", "e3"]

    def test_exec_edges_ignore_other_ports_and_kinds(self):
        graph = _graph()
        assert [e.id for e in graph.exec_edges_from("a", "other_out")] == ["e4"]
        assert graph.exec_edges_from("b", "exec_out") == []

    def test_incoming_edge_first_match_wins(self):
        edge = _graph().incoming_edge("b", "data_in")
        assert edge is not None
        assert edge.id == "e5"

    def test_incoming_edge_missing(self):
        assert _graph().incoming_edge("a", "data_in") is None

    def test_find_node(self):
        graph = _graph()
        assert graph.find_node("c").id == "c"
        assert graph.find_node("zzz") is None

    def test_node_port_lookup(self):
        node = Node(id="n", type="t", ports=[Port(id="p", kind="data", direction="in")])
        assert node.port("p").kind == "data"
        assert node.port("q") is None


class TestJsonContract:
    """Test the serialization shape shared with the editor."""

    def test_parse_editor_json(self):
        payload = {
            "schemaVersion": "CJ-GRAPH-0.1",
            "graphId": "g1",
            "name": "Demo",
            "nodes": [
                {
                    "id": "n1",
                    "type": "data.constNumber",
                    "title": "Const Number",
                    "position": {"x": 1, "y": 2},
                    "config": {"value": 3},
                    "ports": [{"id": "data_out", "kind": "data", "direction": "out", "dataType": "number"}],
                }
            ],
            "edges": [
                {
                    "id": "e1",
                    "kind": "data",
                    "from": {"nodeId": "n1", "portId": "data_out"},
                    "to": {"nodeId": "n2", "portId": "data_in"},
                }
            ],
            "meta": {"createdAt": "2024-01-01T00:00:00Z"},
        }

        graph = Graph.from_json(json.dumps(payload))

        assert graph.graph_id == "g1"
        assert graph.nodes[0].ports[0].data_type == "number"
        assert graph.edges[0].source.node_id == "n1"
        assert graph.edges[0].target.key == ("n2", "data_in")

    def test_dump_uses_aliases(self):
        graph = Graph(graph_id="g", edges=[_edge("e1", "exec", "a", "exec_out", "b", "exec_in")])
        data = json.loads(graph.to_json())

        assert data["graphId"] == "g"
        assert data["edges"][0]["from"] == {"nodeId": "a", "portId": "exec_out"}
        assert data["edges"][0]["to"] == {"nodeId": "b", "portId": "exec_in"}


class TestEventSnapshot:
    def test_position_and_alias(self):
        snapshot = EventSnapshot(event_class="mouseover", x=5, y=6, timestamp=1000)
        assert snapshot.position == (5, 6)
        assert snapshot.model_dump(by_alias=True)["class"] == "mouseover"
