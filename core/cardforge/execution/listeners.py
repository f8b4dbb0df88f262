"""Trigger listeners and the public `start()` entry point."""

from __future__ import annotations

import asyncio
import sys
from typing import Any, Callable, Mapping

from cardforge.config import RuntimeOptions
from cardforge.domain.models import EventSnapshot, Graph, Node
from cardforge.execution.engine import ExecutionEngine, RunContext
from cardforge.registry import NodeTypeRegistry, TriggerBehavior, as_number


def _payload_position(payload: Any) -> tuple[float, float]:
    """Pull a pointer position out of a host event payload (mapping or object)."""
    if isinstance(payload, Mapping):
        x = payload.get("clientX", payload.get("x", 0))
        y = payload.get("clientY", payload.get("y", 0))
    else:
        x = getattr(payload, "clientX", getattr(payload, "x", 0))
        y = getattr(payload, "clientY", getattr(payload, "y", 0))
    return (as_number(x, 0), as_number(y, 0))


class ListenerManager:
    """Arms one host listener per trigger node and starts pulses on firing.

    Firings are neither queued nor deduplicated: a second firing while an
    earlier pulse is suspended starts a second, concurrent pulse.
    """

    def __init__(self, engine: ExecutionEngine) -> None:
        self.engine = engine
        self._unsubscribers: list[Callable[[], None]] = []
        self._inflight: set[asyncio.Task[None]] = set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._armed = False

    @property
    def ctx(self) -> RunContext:
        return self.engine.ctx

    @property
    def armed(self) -> int:
        return len(self._unsubscribers)

    def arm(self) -> None:
        """Subscribe to every resolvable trigger. Unresolvable targets are logged and skipped."""
        self._loop = asyncio.get_running_loop()
        self._armed = True
        events = self.ctx.options.events

        for node in self.ctx.graph.nodes:
            if not self.ctx.registry.has_node_type(node.type):
                continue
            behavior = self.ctx.registry.get(node.type)
            if not isinstance(behavior, TriggerBehavior):
                continue

            selector = behavior.selector(node)
            event_class = behavior.event_class(node)
            target = events.resolve(selector)
            if target is None:
                self.ctx.log(f"Listener target not found for selector: {selector}", {"node": node.id})
                continue

            handler = self._make_handler(node, behavior, event_class)
            self._unsubscribers.append(events.subscribe(target, event_class, handler))
            self.ctx.log(f"Listener armed: {event_class} on {selector}", {"node": node.id})

        sys.stderr.write(f"[LISTENERS] Armed {self.armed} listener(s)\n")
        sys.stderr.flush()

    def disarm(self) -> None:
        """Unsubscribe everything. Pulses already running are left alone."""
        self._armed = False
        unsubscribers, self._unsubscribers = self._unsubscribers, []
        for unsubscribe in unsubscribers:
            try:
                unsubscribe()
            except Exception as e:
                sys.stderr.write(f"[LISTENERS] ERROR unsubscribing: {e}\n")
                sys.stderr.flush()
        sys.stderr.write("[LISTENERS] Disarmed\n")
        sys.stderr.flush()

    def fire(self, node: Node, behavior: TriggerBehavior, event_class: str, payload: Any) -> asyncio.Task[None] | None:
        """Capture the event snapshot and start a pulse at the trigger's exec output."""
        if not self._armed or self._loop is None:
            return None

        ctx = self.ctx
        x, y = _payload_position(payload)
        snapshot = EventSnapshot(event_class=event_class, x=x, y=y, timestamp=ctx.options.clock() * 1000)
        ctx.last_event = snapshot
        ctx.cache.set_value(node.id, behavior.event_port, snapshot)

        task = self._loop.create_task(self.engine.run_pulse(node.id, behavior.exec_out))
        self._inflight.add(task)
        task.add_done_callback(self._pulse_done)
        return task

    def _make_handler(self, node: Node, behavior: TriggerBehavior, event_class: str) -> Callable[[Any], None]:
        def handler(payload: Any = None) -> None:
            self.fire(node, behavior, event_class, payload)
        return handler

    def _pulse_done(self, task: asyncio.Task[None]) -> None:
        self._inflight.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            sys.stderr.write(f"[LISTENERS] Pulse raised {type(error).__name__}: {error}\n")
            sys.stderr.flush()
            self.ctx.log("Pulse failed", {"error": f"{type(error).__name__}: {error}"})

    async def wait_idle(self) -> None:
        """Wait until no pulse is in flight, including ones started meanwhile."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)


class RuntimeHandle:
    """Returned by `start()`; `stop()` disarms triggers without cancelling pulses."""

    def __init__(self, listeners: ListenerManager) -> None:
        self._listeners = listeners
        self._stopped = False

    @property
    def context(self) -> RunContext:
        return self._listeners.ctx

    @property
    def armed(self) -> int:
        return self._listeners.armed

    @property
    def stopped(self) -> bool:
        return self._stopped

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        self._listeners.disarm()

    async def wait_idle(self) -> None:
        await self._listeners.wait_idle()


def start(
    graph: Graph,
    options: RuntimeOptions,
    *,
    registry: NodeTypeRegistry | None = None,
) -> RuntimeHandle:
    """Arm every trigger in `graph` and return a handle to stop them.

    Must be called from a running event loop; pulses run as tasks on it.

    Args:
        graph: Graph snapshot; not modified
        options: Backend, event source, log sink and defaults
        registry: Behavior registry (default: the global one)

    Returns:
        RuntimeHandle for this run
    """
    ctx = RunContext(graph=graph, options=options)
    if registry is not None:
        ctx.registry = registry
    engine = ExecutionEngine(ctx)
    listeners = ListenerManager(engine)
    listeners.arm()
    return RuntimeHandle(listeners)
