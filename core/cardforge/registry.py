"""Node behavior registry.

This module provides:
- The behavior record every node type implements (consume, effect, publish)
- A registry mapping node type tags to behaviors
- A global registry plus the `register_node_type` decorator

Design:
- The dispatcher never switches on type tags; it looks the behavior up here,
  so adding a node type means registering one more class.
- A behavior also declares what kind of producer it is, which tells the data
  resolver whether its outputs can be computed on demand.

Example:
    @register_node_type("math.double")
    class Double(NodeBehavior):
        inputs = (InputSpec("data_in", config_key="value", default=0, coerce=as_number),)

        async def effect(self, node, ctx, inputs):
            return {"data_out": inputs["data_in"] * 2}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Literal

from cardforge.execution.ports import ABSENT

if TYPE_CHECKING:
    from cardforge.domain.models import Node
    from cardforge.execution.engine import RunContext

Producer = Literal["passive", "event", "active"]

Coercer = Callable[[Any, Any], Any]


def as_number(value: Any, default: Any = 0) -> Any:
    """Coerce to int/float, falling back to `default` for non-numeric input."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number:  # NaN
        return default
    return int(number) if number.is_integer() else number


def as_text(value: Any, default: Any = "") -> str:
    if value is None:
        return default
    return str(value)


@dataclass(frozen=True, slots=True)
class InputSpec:
    """How a behavior reads one input port.

    Resolution order: wired value, then `node.config[config_key]`, then
    `default`. A wired `None` falls through like a missing value whenever
    there is a config key or default to fall back to. `coerce(value, default)`
    is applied to whatever was found.
    """

    port_id: str
    config_key: str | None = None
    default: Any = None
    coerce: Coercer | None = None


class NodeBehavior:
    """Behavior record for one node type.

    Subclasses override `effect` (and `produce` for passive producers). The
    dispatcher calls consume -> effect -> publish, then continues the pulse
    along `exec_out` when `executable` is true.
    """

    producer: ClassVar[Producer] = "active"
    executable: ClassVar[bool] = True
    exec_out: ClassVar[str] = "exec_out"
    inputs: ClassVar[tuple[InputSpec, ...]] = ()

    type_id: str = ""

    async def consume(self, node: Node, ctx: RunContext) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for spec in self.inputs:
            value = await ctx.resolver.resolve_input(node, spec.port_id)
            if value is None and (spec.config_key is not None or spec.default is not None):
                value = ABSENT
            if value is ABSENT and spec.config_key is not None:
                value = node.config.get(spec.config_key)
                if value is None:
                    value = ABSENT
            if value is ABSENT:
                value = spec.default
            if spec.coerce is not None and value is not None:
                value = spec.coerce(value, spec.default)
            values[spec.port_id] = value
        return values

    async def effect(self, node: Node, ctx: RunContext, inputs: dict[str, Any]) -> dict[str, Any]:
        """Perform the node's effects and return outputs keyed by port id."""
        return {}

    def publish(self, node: Node, ctx: RunContext, outputs: dict[str, Any]) -> None:
        for port_id, value in outputs.items():
            ctx.cache.set_value(node.id, port_id, value)

    async def produce(self, node: Node, ctx: RunContext, port_id: str) -> Any:
        """Compute an output without a pulse (passive producers only)."""
        return ABSENT

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.type_id})"


class TriggerBehavior(NodeBehavior):
    """An external-trigger node armed by the listener manager.

    It is not run by pulses; its event output is published when the host
    event fires, and the pulse starts at its `exec_out`.
    """

    producer: ClassVar[Producer] = "event"
    executable: ClassVar[bool] = False
    event_port: ClassVar[str] = "data_out_event"
    default_selector: ClassVar[str] = ""
    default_event_class: ClassVar[str] = ""

    def selector(self, node: Node) -> str:
        return as_text(node.config.get("selector"), self.default_selector)

    def event_class(self, node: Node) -> str:
        return as_text(node.config.get("eventType"), self.default_event_class)


class NodeTypeRegistry:
    """Registry of node behaviors keyed by type tag.

    Example:
        registry = NodeTypeRegistry()

        @registry.register_behavior("my.type")
        class MyBehavior(NodeBehavior):
            ...

        behavior = registry.get("my.type")
    """

    def __init__(self) -> None:
        self._behaviors: dict[str, NodeBehavior] = {}

    def register(self, type_id: str, behavior: NodeBehavior) -> None:
        """Register a behavior instance for a node type (replacing any previous one)."""
        behavior.type_id = type_id
        self._behaviors[type_id] = behavior

    def register_behavior(self, type_id: str) -> Callable[[type[NodeBehavior]], type[NodeBehavior]]:
        """Class decorator: instantiate and register a behavior."""
        def decorator(cls: type[NodeBehavior]) -> type[NodeBehavior]:
            self.register(type_id, cls())
            return cls
        return decorator

    def get(self, type_id: str) -> NodeBehavior:
        """Look up the behavior for a type.

        Raises:
            ValueError: If no behavior is registered for the type
        """
        behavior = self._behaviors.get(type_id)
        if behavior is None:
            raise ValueError(
                f"No behavior registered for node type: {type_id}\n"
                f"Available types: {', '.join(sorted(self._behaviors.keys()))}"
            )
        return behavior

    def has_node_type(self, type_id: str) -> bool:
        return type_id in self._behaviors

    def types(self) -> list[str]:
        return sorted(self._behaviors)


# Global registry instance
_global_registry = NodeTypeRegistry()


def register_node_type(type_id: str) -> Callable[[type[NodeBehavior]], type[NodeBehavior]]:
    """Decorator to register a behavior class in the global registry."""
    return _global_registry.register_behavior(type_id)


def get_behavior(type_id: str) -> NodeBehavior:
    return _global_registry.get(type_id)


def has_node_type(type_id: str) -> bool:
    return _global_registry.has_node_type(type_id)


def get_global_registry() -> NodeTypeRegistry:
    """Get the global node type registry.

    Importing `cardforge.execution` registers the built-in behaviors.
    """
    return _global_registry
