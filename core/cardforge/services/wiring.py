"""Graph wiring: adding and checking edges.

Invalid connections are returned as values (`ConnectionRejected` subclasses)
rather than raised, so an editor can show them to the user directly.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from cardforge.domain.models import Edge, Endpoint, Graph, PortKind


@dataclass(frozen=True, slots=True)
class ConnectionRejected:
    """Base outcome for an edge that may not be added."""

    source: tuple[str, str]
    target: tuple[str, str]
    edge_id: str | None = None

    @property
    def message(self) -> str:
        return f"Invalid connection {self._describe()}"

    def _describe(self) -> str:
        return f"{self.source[0]}.{self.source[1]} → {self.target[0]}.{self.target[1]}"


@dataclass(frozen=True, slots=True)
class UnknownPort(ConnectionRejected):
    missing: tuple[str, str] = ("", "")

    @property
    def message(self) -> str:
        return f"Unknown port {self.missing[0]}.{self.missing[1]} in {self._describe()}"


@dataclass(frozen=True, slots=True)
class ConnectionDirectionMismatch(ConnectionRejected):
    @property
    def message(self) -> str:
        return f"Connections must go from an output to an input: {self._describe()}"


@dataclass(frozen=True, slots=True)
class ConnectionKindMismatch(ConnectionRejected):
    source_kind: PortKind | None = None
    target_kind: PortKind | None = None

    @property
    def message(self) -> str:
        return (
            f"Connector kinds must match ({self.source_kind} ≠ {self.target_kind}): {self._describe()}"
        )


@dataclass(frozen=True, slots=True)
class EdgeKindMismatch(ConnectionRejected):
    """An existing edge whose declared kind disagrees with its ports."""

    declared: PortKind | None = None
    actual: PortKind | None = None

    @property
    def message(self) -> str:
        return f"Edge {self.edge_id} is declared {self.declared} but connects {self.actual} ports"


@dataclass(frozen=True, slots=True)
class LinkResult:
    """Result of `add_link`.

    Attributes:
        graph: The graph with the new edge, or the unchanged graph on rejection
        edge: The new edge, None on rejection
        error: Why the edge was rejected, None on success
    """

    graph: Graph
    edge: Edge | None = None
    error: ConnectionRejected | None = None

    @property
    def success(self) -> bool:
        return self.error is None


def _new_edge_id() -> str:
    return f"edge_{uuid.uuid4().hex[:10]}"


def check_connection(
    graph: Graph,
    source_node_id: str,
    source_port: str,
    target_node_id: str,
    target_port: str,
    *,
    edge_id: str | None = None,
) -> ConnectionRejected | PortKind:
    """Return the shared port kind, or why the ports cannot be connected."""
    source = (source_node_id, source_port)
    target = (target_node_id, target_port)

    ports = []
    for node_id, port_id in (source, target):
        node = graph.find_node(node_id)
        port = node.port(port_id) if node is not None else None
        if port is None:
            return UnknownPort(source, target, edge_id, missing=(node_id, port_id))
        ports.append(port)

    out_port, in_port = ports
    if out_port.direction != "out" or in_port.direction != "in":
        return ConnectionDirectionMismatch(source, target, edge_id)
    if out_port.kind != in_port.kind:
        return ConnectionKindMismatch(
            source, target, edge_id, source_kind=out_port.kind, target_kind=in_port.kind
        )
    return out_port.kind


def add_link(
    graph: Graph,
    source_node_id: str,
    source_port: str,
    target_node_id: str,
    target_port: str,
    *,
    edge_id: str | None = None,
) -> LinkResult:
    """Connect two ports, returning a new graph.

    Args:
        graph: Graph to extend (not modified)
        source_node_id: Node owning the output port
        source_port: Output port id
        target_node_id: Node owning the input port
        target_port: Input port id
        edge_id: Optional explicit edge id (default: generated)

    Returns:
        LinkResult; `error` is set when the ports do not fit together
    """
    outcome = check_connection(
        graph, source_node_id, source_port, target_node_id, target_port, edge_id=edge_id
    )
    if isinstance(outcome, ConnectionRejected):
        return LinkResult(graph=graph, error=outcome)

    edge = Edge(
        id=edge_id or _new_edge_id(),
        kind=outcome,
        source=Endpoint(node_id=source_node_id, port_id=source_port),
        target=Endpoint(node_id=target_node_id, port_id=target_port),
    )
    return LinkResult(graph=graph.model_copy(update={"edges": [*graph.edges, edge]}), edge=edge)


def remove_link(graph: Graph, edge_id: str) -> Graph:
    """Return a copy of `graph` without the edge `edge_id`."""
    return graph.model_copy(update={"edges": [e for e in graph.edges if e.id != edge_id]})


def validate_graph(graph: Graph) -> list[ConnectionRejected]:
    """List every edge that `add_link` would reject or whose kind is wrong."""
    problems: list[ConnectionRejected] = []
    for edge in graph.edges:
        outcome = check_connection(
            graph,
            edge.source.node_id,
            edge.source.port_id,
            edge.target.node_id,
            edge.target.port_id,
            edge_id=edge.id,
        )
        if isinstance(outcome, ConnectionRejected):
            problems.append(outcome)
        elif outcome != edge.kind:
            problems.append(
                EdgeKindMismatch(edge.source.key, edge.target.key, edge.id, declared=edge.kind, actual=outcome)
            )
    return problems
