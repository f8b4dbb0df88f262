"""In-memory host: an event source and effect backend without a UI.

Used by the CLI to run graphs headlessly, and by tests.
"""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field
from typing import Any, Callable

from cardforge.backend import EventHandler, Unsubscribe


@dataclass(eq=False)
class Element:
    """A host element. Mounts are elements with kind "mount"."""

    id: str
    kind: str
    params: dict[str, Any] = field(default_factory=dict)
    parent: Element | None = None
    children: list[Element] = field(default_factory=list)

    @property
    def attached(self) -> bool:
        return self.parent is not None

    def append(self, child: Element) -> None:
        if child.parent is not None:
            child.parent.children.remove(child)
        child.parent = self
        self.children.append(child)

    def __repr__(self) -> str:
        return f"Element({self.id}, kind={self.kind})"


@dataclass(frozen=True, slots=True)
class Target:
    selector: str


@dataclass(frozen=True, slots=True)
class AnimationRecord:
    element: Element
    keyframes: list[dict[str, Any]]
    duration_ms: float


class HeadlessHost:
    """Implements `EventSource` and `EffectBackend` in memory.

    Args:
        time_scale: Multiplier applied to animation durations (0 = instant)
    """

    def __init__(self, *, time_scale: float = 1.0) -> None:
        self.time_scale = time_scale
        self.targets: dict[str, Target] = {}
        self.mounts: dict[str, Element] = {}
        self.elements: list[Element] = []
        self.animations: list[AnimationRecord] = []
        self._handlers: dict[tuple[Target, str], list[EventHandler]] = {}
        self._ids = itertools.count(1)

    # Event source -----------------------------------------------------------

    def add_target(self, selector: str) -> Target:
        target = self.targets.get(selector)
        if target is None:
            target = Target(selector)
            self.targets[selector] = target
        return target

    def resolve(self, selector: str) -> Target | None:
        return self.targets.get(selector)

    def subscribe(self, target: Target, event_class: str, handler: EventHandler) -> Unsubscribe:
        handlers = self._handlers.setdefault((target, event_class), [])
        handlers.append(handler)

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def listener_count(self, selector: str, event_class: str = "mouseover") -> int:
        target = self.targets.get(selector)
        if target is None:
            return 0
        return len(self._handlers.get((target, event_class), []))

    def fire(self, selector: str, event_class: str = "mouseover", *, x: float = 0, y: float = 0) -> int:
        """Dispatch an event to subscribed handlers; returns how many ran."""
        target = self.targets.get(selector)
        if target is None:
            return 0
        handlers = list(self._handlers.get((target, event_class), []))
        payload = {"type": event_class, "clientX": x, "clientY": y}
        for handler in handlers:
            handler(payload)
        return len(handlers)

    # Effect backend ---------------------------------------------------------

    def resolve_mount(self, mount_id: str) -> Element:
        mount = self.mounts.get(mount_id)
        if mount is None:
            mount = Element(id=mount_id, kind="mount")
            self.mounts[mount_id] = mount
        return mount

    def create_element(self, kind: str, params: dict[str, Any]) -> Element:
        params = dict(params)
        parent = params.pop("parent", None)
        element = Element(id=f"el_{next(self._ids)}", kind=kind, params=params)
        if isinstance(parent, Element):
            parent.append(element)
        self.elements.append(element)
        return element

    async def animate(self, handle: Element, keyframes: list[dict[str, Any]], duration_ms: float) -> None:
        self.animations.append(AnimationRecord(handle, keyframes, duration_ms))
        await asyncio.sleep(max(duration_ms, 0) / 1000 * self.time_scale)

    def destroy(self, handle: Element) -> None:
        if handle.parent is not None:
            handle.parent.children.remove(handle)
            handle.parent = None

    def live_elements(self, mount_id: str) -> list[Element]:
        mount = self.mounts.get(mount_id)
        return list(mount.children) if mount is not None else []


def collecting_log() -> tuple[list[tuple[str, Any]], Callable[[str, Any], None]]:
    """A log sink that appends `(message, data)` to a list."""
    entries: list[tuple[str, Any]] = []

    def log(message: str, data: Any = None) -> None:
        entries.append((message, data))

    return entries, log
