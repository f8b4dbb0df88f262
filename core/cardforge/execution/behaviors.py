"""Built-in node behaviors.

Importing this module registers every built-in type in the global registry.
Config fields are coerced where they are read; wired values win over config,
and config wins over the hard defaults below.
"""

from __future__ import annotations

import textwrap
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any, Callable, Mapping

from cardforge.backend import maybe_await
from cardforge.domain.models import EventSnapshot, Node
from cardforge.execution.ports import ABSENT
from cardforge.registry import (
    InputSpec,
    NodeBehavior,
    TriggerBehavior,
    as_number,
    as_text,
    register_node_type,
)

if TYPE_CHECKING:
    from cardforge.execution.engine import RunContext


# ---------------------------------------------------------------------------
# Passive producers
# ---------------------------------------------------------------------------


@register_node_type("data.constString")
class ConstString(NodeBehavior):
    producer = "passive"
    executable = False

    async def produce(self, node: Node, ctx: RunContext, port_id: str) -> Any:
        if port_id != "data_out":
            return ABSENT
        return as_text(node.config.get("value"), "")


@register_node_type("data.constNumber")
class ConstNumber(NodeBehavior):
    producer = "passive"
    executable = False

    async def produce(self, node: Node, ctx: RunContext, port_id: str) -> Any:
        if port_id != "data_out":
            return ABSENT
        value = node.config.get("value")
        return as_number(value, 0) if value is not None else 0


@register_node_type("tool.uiRoot")
class UiRoot(NodeBehavior):
    """Yields the shared mount handle for `config.mountId`."""

    producer = "passive"
    executable = False

    async def produce(self, node: Node, ctx: RunContext, port_id: str) -> Any:
        if port_id != "tool_out":
            return ABSENT
        mount_id = as_text(node.config.get("mountId"), ctx.options.mount_id)
        return await maybe_await(ctx.backend.resolve_mount(mount_id))


# ---------------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------------


@register_node_type("event.uiHover")
class UiHover(TriggerBehavior):
    default_selector = "#hoverTarget"
    default_event_class = "mouseover"


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------


def _event_position(event: Any) -> tuple[float, float] | None:
    if isinstance(event, EventSnapshot):
        return event.position
    if isinstance(event, Mapping):
        x = event.get("x", event.get("clientX"))
        y = event.get("y", event.get("clientY"))
        if x is not None and y is not None:
            return (as_number(x, 0), as_number(y, 0))
    return None


@register_node_type("ui.spawnEmoji")
class SpawnEmoji(NodeBehavior):
    inputs = (
        InputSpec("tool_in"),
        InputSpec("data_in_emoji", config_key="defaultEmoji", default="✨", coerce=as_text),
        InputSpec("data_in_size", config_key="defaultSizePx", default=120, coerce=as_number),
        InputSpec("data_in_event"),
    )

    async def effect(self, node: Node, ctx: RunContext, inputs: dict[str, Any]) -> dict[str, Any]:
        root = inputs["tool_in"]
        if root is None:
            root = await maybe_await(ctx.backend.resolve_mount(ctx.options.mount_id))

        event = inputs["data_in_event"]
        if event is None:
            event = ctx.last_event
        position = _event_position(event)
        if position is None:
            width, height = ctx.options.viewport
            position = (width / 2, height / 2)

        x = position[0] + as_number(node.config.get("offsetX", 0), 0)
        y = position[1] + as_number(node.config.get("offsetY", 0), 0)
        emoji = inputs["data_in_emoji"]
        size = inputs["data_in_size"]

        element = await maybe_await(
            ctx.backend.create_element(
                "emoji",
                {"text": emoji, "x": x, "y": y, "size": size, "parent": root},
            )
        )
        ctx.log("Spawned emoji", {"emoji": emoji, "x": x, "y": y, "size": size})
        return {"data_out_el": element}


@register_node_type("ui.animateFly")
class AnimateFly(NodeBehavior):
    """Animates an element and waits for the animation to settle."""

    inputs = (
        InputSpec("data_in_el"),
        InputSpec("data_in_toX", config_key="toX", default=900, coerce=as_number),
        InputSpec("data_in_toY", config_key="toY", default=-200, coerce=as_number),
        InputSpec("data_in_ms", config_key="durationMs", default=900, coerce=as_number),
        InputSpec("data_in_scaleTo", config_key="scaleTo", coerce=as_number),
    )

    async def effect(self, node: Node, ctx: RunContext, inputs: dict[str, Any]) -> dict[str, Any]:
        element = inputs["data_in_el"]
        if element is None:
            ctx.log("AnimateFly: missing element input", {"node": node.id})
            return {}

        to_x = inputs["data_in_toX"]
        to_y = inputs["data_in_toY"]
        duration_ms = inputs["data_in_ms"]
        scale_to = inputs["data_in_scaleTo"]
        if scale_to is None:
            scale_to = as_number(node.config.get("endScale", 1.6), 1.6)

        keyframes = [
            {"x": 0, "y": 0, "scale": as_number(node.config.get("startScale", 1), 1), "opacity": 1},
            {"x": to_x, "y": to_y, "scale": scale_to, "opacity": 0.9},
            {"x": to_x * 1.08, "y": to_y * 1.08, "scale": scale_to * 1.05, "opacity": 0},
        ]
        try:
            await maybe_await(ctx.backend.animate(element, keyframes, duration_ms))
        except Exception as e:
            # A failed animation still counts as settled.
            ctx.log("Animation did not finish", {"node": node.id, "error": f"{type(e).__name__}: {e}"})

        ctx.log("Animated emoji", {"toX": to_x, "toY": to_y, "durationMs": duration_ms})
        return {"data_out_el": element}


@register_node_type("ui.removeElement")
class RemoveElement(NodeBehavior):
    inputs = (InputSpec("data_in_el"),)

    async def effect(self, node: Node, ctx: RunContext, inputs: dict[str, Any]) -> dict[str, Any]:
        element = inputs["data_in_el"]
        if element is None:
            ctx.log("RemoveElement: missing element input", {"node": node.id})
            return {}
        await maybe_await(ctx.backend.destroy(element))
        ctx.log("Removed element")
        return {}


# ---------------------------------------------------------------------------
# Debug & logic
# ---------------------------------------------------------------------------


@register_node_type("debug.log")
class DebugLog(NodeBehavior):
    inputs = (InputSpec("data_in"),)

    async def effect(self, node: Node, ctx: RunContext, inputs: dict[str, Any]) -> dict[str, Any]:
        prefix = node.config.get("prefix")
        if prefix is None:
            prefix = node.config.get("label")
        if prefix is None:
            prefix = "[graph]"
        ctx.log(as_text(prefix), {"value": inputs["data_in"]})
        return {}


def compile_expression(code: str) -> Callable[[Any, Any, Any], Any]:
    """Compile `code` as the body of `f(input, event, helpers)`.

    Raises:
        SyntaxError: If the code does not compile
    """
    body = textwrap.indent(textwrap.dedent(code or ""), "    ")
    source = f"def __expression__(input, event, helpers):\n{body}\n    pass\n"
    namespace: dict[str, Any] = {}
    exec(compile(source, "<expression>", "exec"), namespace)  # noqa: S102 - user code by design
    return namespace["__expression__"]


@register_node_type("logic.eval")
class EvalExpression(NodeBehavior):
    """Runs user code; failures go to `error_out` and the pulse continues."""

    inputs = (InputSpec("data_in"),)

    async def effect(self, node: Node, ctx: RunContext, inputs: dict[str, Any]) -> dict[str, Any]:
        code = as_text(node.config.get("code"), "")
        event = ctx.last_event.model_dump(by_alias=True) if ctx.last_event is not None else None
        helpers = SimpleNamespace(
            log=lambda message, data=None: ctx.log(str(message), data),
            now=lambda: ctx.options.clock() * 1000,
        )
        try:
            fn = compile_expression(code)
            result = await maybe_await(fn(inputs["data_in"], event, helpers))
        except Exception as e:
            message = f"{type(e).__name__}: {e}"
            ctx.log("Expression failed", {"node": node.id, "error": message})
            return {"error_out": {"message": message}}

        # Only the port for this outcome is written; the other keeps its last value.
        ctx.log("Evaluated expression", {"node": node.id, "output": result})
        return {"data_out": result}
