"""Host collaborator interfaces consumed by the engine.

The engine only ever sees opaque handles. Every method may return either a
plain value or an awaitable; the engine awaits when it gets one.
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Protocol, TypeVar

T = TypeVar("T")

Handle = Any
TargetRef = Any
EventHandler = Callable[[Any], None]
Unsubscribe = Callable[[], None]


class EventSource(Protocol):
    """Where external trigger events come from."""

    def resolve(self, selector: str) -> TargetRef | None:
        """Resolve a selector to a host target, or None if it does not exist."""
        ...

    def subscribe(self, target: TargetRef, event_class: str, handler: EventHandler) -> Unsubscribe:
        """Call `handler(payload)` on each firing until the returned callable is invoked."""
        ...


class EffectBackend(Protocol):
    """Performs host-visible effects behind opaque handles."""

    def resolve_mount(self, mount_id: str) -> Handle | Awaitable[Handle]:
        """Return the shared mount point for `mount_id`."""
        ...

    def create_element(self, kind: str, params: dict[str, Any]) -> Handle | Awaitable[Handle]:
        """Create a visual element; `params["parent"]` is the mount it goes in."""
        ...

    def animate(self, handle: Handle, keyframes: list[dict[str, Any]], duration_ms: float) -> Awaitable[Any]:
        """Start an animation; the awaitable settles when it finishes (or fails)."""
        ...

    def destroy(self, handle: Handle) -> Any:
        """Remove the element from its parent if it is still attached."""
        ...


async def maybe_await(value: T | Awaitable[T]) -> T:
    if inspect.isawaitable(value):
        return await value
    return value
