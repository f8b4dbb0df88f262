"""Action-graph execution engine.

This package provides:
- A per-run value cache keyed by (node, port)
- A data resolver that computes passive producers on demand
- Behavior dispatch and depth-first pulse propagation
- Trigger listeners and the `start()` entry point

Architecture:
- ports.py: Value cache
- resolver.py: Input resolution
- behaviors.py: Built-in node behaviors
- engine.py: Run context, dispatch, pulse propagation
- listeners.py: Trigger arming and `start()`

Submodules are imported lazily so that `cardforge.registry` can depend on
`cardforge.execution.ports` without pulling in the engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

__all__ = ["ExecutionEngine", "RunContext", "ListenerManager", "RuntimeHandle", "start"]


if TYPE_CHECKING:
    from .engine import ExecutionEngine as ExecutionEngine
    from .engine import RunContext as RunContext
    from .listeners import ListenerManager as ListenerManager
    from .listeners import RuntimeHandle as RuntimeHandle
    from .listeners import start as start


def __getattr__(name: str) -> Any:
    if name in {"ExecutionEngine", "RunContext"}:
        from . import engine

        return getattr(engine, name)
    if name in {"ListenerManager", "RuntimeHandle", "start"}:
        from . import listeners

        return getattr(listeners, name)
    raise AttributeError(name)
