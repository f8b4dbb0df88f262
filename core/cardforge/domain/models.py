"""Pydantic domain models for CardForge action graphs.

An action graph is a flat list of typed nodes plus typed edges between their
ports. These models are the JSON contract shared with the editor and the
persistence layer, and are treated as an immutable snapshot by the engine.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

PortKind = Literal["exec", "data", "tool", "resource", "error"]
PortDirection = Literal["in", "out"]

GRAPH_SCHEMA_VERSION = "CJ-GRAPH-0.1"


class Position(BaseModel):
    """2D position in the editor canvas."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(0.0, description="X coordinate")
    y: float = Field(0.0, description="Y coordinate")


class Port(BaseModel):
    """A typed connector on a node.

    `kind` decides what may be wired to it; `data_type` is a semantic tag only
    (e.g. "eventPayload", "domElement") and is never enforced.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Port id, unique within its node")
    kind: PortKind = Field(..., description="Connector category")
    direction: PortDirection = Field(..., description="in or out")
    name: str | None = Field(default=None, description="Display name")
    data_type: str | None = Field(default=None, alias="dataType")
    required: bool = Field(default=False)


class Node(BaseModel):
    """A node instance. Its port set is a snapshot of its type's ports."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable unique identifier")
    type: str = Field(..., description="Node type tag (e.g. 'ui.spawnEmoji')")
    title: str | None = Field(default=None, description="Display title")
    position: Position | None = Field(default=None)
    config: dict[str, Any] = Field(default_factory=dict, description="Type-specific settings")
    ports: list[Port] = Field(default_factory=list)

    def port(self, port_id: str) -> Port | None:
        for port in self.ports:
            if port.id == port_id:
                return port
        return None


class Endpoint(BaseModel):
    """One end of an edge: a (node, port) pair."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    node_id: str = Field(..., alias="nodeId")
    port_id: str = Field(..., alias="portId")

    @property
    def key(self) -> tuple[str, str]:
        return (self.node_id, self.port_id)

    def __repr__(self) -> str:
        return f"{self.node_id}.{self.port_id}"


class Edge(BaseModel):
    """A directed, typed edge from an output port to an input port."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Edge id")
    kind: PortKind = Field(..., description="Must equal both endpoint port kinds")
    source: Endpoint = Field(..., alias="from")
    target: Endpoint = Field(..., alias="to")


class Graph(BaseModel):
    """An action graph: nodes plus edges, in declaration order."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    schema_version: str = Field(default=GRAPH_SCHEMA_VERSION, alias="schemaVersion")
    graph_id: str | None = Field(default=None, alias="graphId")
    name: str | None = Field(default=None)
    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    def find_node(self, node_id: str) -> Node | None:
        """Find a node by ID in the graph."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def exec_edges_from(self, node_id: str, port_id: str) -> list[Edge]:
        """Execution edges leaving (node_id, port_id), in declaration order."""
        return [
            edge
            for edge in self.edges
            if edge.kind == "exec" and edge.source.node_id == node_id and edge.source.port_id == port_id
        ]

    def incoming_edge(self, node_id: str, port_id: str) -> Edge | None:
        """The edge targeting (node_id, port_id).

        At most one edge per input port is expected; the first declared one
        wins when there are more.
        """
        for edge in self.edges:
            if edge.target.node_id == node_id and edge.target.port_id == port_id:
                return edge
        return None

    def to_json(self, *, indent: int | None = 2) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)

    @classmethod
    def from_json(cls, text: str | bytes) -> Graph:
        return cls.model_validate_json(text)


class EventSnapshot(BaseModel):
    """Normalized payload captured when an external trigger fires."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    event_class: str = Field(..., alias="class")
    x: float = Field(0.0)
    y: float = Field(0.0)
    timestamp: float = Field(..., description="Milliseconds since the epoch")

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)
