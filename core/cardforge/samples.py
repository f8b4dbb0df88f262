"""Sample graphs."""

from __future__ import annotations

from cardforge.catalog import make_node
from cardforge.domain.models import Edge, Endpoint, Graph, PortKind


def _edge(edge_id: str, kind: PortKind, from_node: str, from_port: str, to_node: str, to_port: str) -> Edge:
    return Edge(
        id=edge_id,
        kind=kind,
        source=Endpoint(node_id=from_node, port_id=from_port),
        target=Endpoint(node_id=to_node, port_id=to_port),
    )


def make_hover_emoji_demo_graph(graph_id: str = "graph_demo_hover_emoji") -> Graph:
    """Hover the target -> spawn an emoji at the pointer -> fly it away -> remove it."""
    nodes = [
        make_node("event.uiHover", "n_hover", position=(0, 0), selector="#hoverTarget", eventType="mouseover"),
        make_node("tool.uiRoot", "n_uiRoot", position=(0, 180), mountId="cj-ui-overlay"),
        make_node("data.constString", "n_emoji", position=(-220, 200), value="🪽"),
        make_node("data.constNumber", "n_size", position=(-220, 280), value=120),
        make_node("ui.spawnEmoji", "n_spawn", position=(280, 40), defaultEmoji="🪽", defaultSizePx=120),
        make_node("ui.animateFly", "n_fly", position=(600, 40), toX=1100, toY=-180, durationMs=900),
        make_node("ui.removeElement", "n_remove", position=(920, 40)),
    ]
    edges = [
        _edge("e_exec_1", "exec", "n_hover", "exec_out", "n_spawn", "exec_in"),
        _edge("e_exec_2", "exec", "n_spawn", "exec_out", "n_fly", "exec_in"),
        _edge("e_exec_3", "exec", "n_fly", "exec_out", "n_remove", "exec_in"),
        _edge("e_data_emoji", "data", "n_emoji", "data_out", "n_spawn", "data_in_emoji"),
        _edge("e_data_size", "data", "n_size", "data_out", "n_spawn", "data_in_size"),
        _edge("e_data_event", "data", "n_hover", "data_out_event", "n_spawn", "data_in_event"),
        _edge("e_tool_1", "tool", "n_uiRoot", "tool_out", "n_spawn", "tool_in"),
        _edge("e_data_el_1", "data", "n_spawn", "data_out_el", "n_fly", "data_in_el"),
        _edge("e_data_el_2", "data", "n_fly", "data_out_el", "n_remove", "data_in_el"),
    ]
    return Graph(graph_id=graph_id, name="Hover -> Flying Emoji Demo", nodes=nodes, edges=edges)
