"""Node type catalog.

Each node type declares a fixed port set and default config. Node instances
carry a snapshot of these ports, so the engine never consults the catalog at
run time; it is used when building graphs (`make_node`) and by the CLI.
"""

from __future__ import annotations

import copy
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cardforge.domain.models import Node, Port, PortDirection, PortKind, Position


class NodeTypeSpec(BaseModel):
    """Static description of a node type."""

    model_config = ConfigDict(frozen=True)

    type: str
    title: str
    group: str
    description: str = ""
    ports: list[Port] = Field(default_factory=list)
    default_config: dict[str, Any] = Field(default_factory=dict)


def _port(
    id: str,  # noqa: A002 - id is a common param name
    name: str,
    kind: PortKind,
    direction: PortDirection,
    data_type: str | None = None,
    required: bool = False,
) -> Port:
    return Port(id=id, name=name, kind=kind, direction=direction, data_type=data_type, required=required)


_EXEC_IN = _port("exec_in", "In", "exec", "in")
_EXEC_OUT = _port("exec_out", "Out", "exec", "out")


NODE_CATALOG: dict[str, NodeTypeSpec] = {
    spec.type: spec
    for spec in [
        NodeTypeSpec(
            type="event.uiHover",
            title="UI Hover Listener",
            group="Events & Listeners",
            description="Listens for an event on a host selector and emits an exec pulse plus the event payload.",
            ports=[
                _port("exec_out", "Triggered", "exec", "out"),
                _port("data_out_event", "Event", "data", "out", "eventPayload"),
            ],
            default_config={"selector": "#hoverTarget", "eventType": "mouseover"},
        ),
        NodeTypeSpec(
            type="data.constString",
            title="Const String",
            group="Data",
            description="Outputs a constant string.",
            ports=[_port("data_out", "Value", "data", "out", "string")],
            default_config={"value": "🚀"},
        ),
        NodeTypeSpec(
            type="data.constNumber",
            title="Const Number",
            group="Data",
            description="Outputs a constant number.",
            ports=[_port("data_out", "Value", "data", "out", "number")],
            default_config={"value": 96},
        ),
        NodeTypeSpec(
            type="tool.uiRoot",
            title="UI Root",
            group="Tools",
            description="Provides the mount point that UI effects are created in.",
            ports=[_port("tool_out", "UI Root", "tool", "out", "domElement")],
            default_config={"mountId": "cj-ui-overlay"},
        ),
        NodeTypeSpec(
            type="ui.spawnEmoji",
            title="Spawn Emoji",
            group="UI",
            description="Creates an emoji element in the UI root, near the pointer when an event is connected.",
            ports=[
                _EXEC_IN,
                _EXEC_OUT,
                _port("data_in_emoji", "Emoji", "data", "in", "string", required=True),
                _port("data_in_size", "Size px", "data", "in", "number"),
                _port("data_in_event", "Event", "data", "in", "eventPayload"),
                _port("tool_in", "UI Root", "tool", "in", "domElement"),
                _port("data_out_el", "Element", "data", "out", "domElement"),
            ],
            default_config={
                "defaultEmoji": "🚀",
                "defaultSizePx": 96,
                "positionMode": "fromEvent",
                "offsetX": 10,
                "offsetY": -10,
            },
        ),
        NodeTypeSpec(
            type="ui.animateFly",
            title="Animate Fly",
            group="UI",
            description="Animates an element flying across the screen while scaling, then waits for it to settle.",
            ports=[
                _EXEC_IN,
                _EXEC_OUT,
                _port("data_in_el", "Element", "data", "in", "domElement", required=True),
                _port("data_in_toX", "To X", "data", "in", "number"),
                _port("data_in_toY", "To Y", "data", "in", "number"),
                _port("data_in_ms", "Duration ms", "data", "in", "number"),
                _port("data_in_scaleTo", "Scale to", "data", "in", "number"),
                _port("data_out_el", "Element", "data", "out", "domElement"),
            ],
            default_config={
                "toX": 900,
                "toY": -120,
                "durationMs": 900,
                "easing": "cubic-bezier(0.2, 0.8, 0.2, 1)",
                "startScale": 1,
                "endScale": 1.7,
            },
        ),
        NodeTypeSpec(
            type="ui.removeElement",
            title="Remove Element",
            group="UI",
            description="Removes an element from its parent.",
            ports=[
                _EXEC_IN,
                _EXEC_OUT,
                _port("data_in_el", "Element", "data", "in", "domElement", required=True),
            ],
        ),
        NodeTypeSpec(
            type="debug.log",
            title="Debug Log",
            group="Debug",
            description="Writes a value to the runtime log.",
            ports=[_EXEC_IN, _EXEC_OUT, _port("data_in", "Value", "data", "in", "any")],
            default_config={"label": "debug"},
        ),
        NodeTypeSpec(
            type="logic.eval",
            title="Eval Python (Unsafe)",
            group="Logic",
            description=(
                "Runs Python code from config as a function of (input, event, helpers). "
                "Only use in trusted authoring environments."
            ),
            ports=[
                _EXEC_IN,
                _EXEC_OUT,
                _port("data_in", "Input", "data", "in", "json"),
                _port("data_out", "Output", "data", "out", "json"),
                _port("error_out", "Error", "error", "out", "error"),
            ],
            default_config={"code": "return {'ok': True, 'input': input}"},
        ),
    ]
}


def get_node_type(node_type: str) -> NodeTypeSpec:
    """Look up a catalog entry.

    Raises:
        ValueError: If the type is not in the catalog
    """
    spec = NODE_CATALOG.get(node_type)
    if spec is None:
        raise ValueError(
            f"Unknown node type: {node_type}\n"
            f"Available types: {', '.join(sorted(NODE_CATALOG))}"
        )
    return spec


def make_node(
    node_type: str,
    node_id: str,
    *,
    position: tuple[float, float] = (0.0, 0.0),
    **config: Any,
) -> Node:
    """Instantiate a node of a catalog type, overriding default config."""
    spec = get_node_type(node_type)
    merged = copy.deepcopy(spec.default_config)
    merged.update(config)
    return Node(
        id=node_id,
        type=spec.type,
        title=spec.title,
        position=Position(x=position[0], y=position[1]),
        config=merged,
        ports=list(spec.ports),
    )
