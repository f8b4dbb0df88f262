"""CardForge core package.

Action graphs (typed nodes, ports and edges) plus the engine that runs them
in response to host events. This package has no dependency on any UI
runtime; hosts plug in through `cardforge.backend`.

Engine symbols are imported lazily so that the models and wiring services
can be used without loading the execution package.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

__version__ = "0.1.0"

__all__ = ["Graph", "Node", "Edge", "Port", "RuntimeOptions", "RuntimeHandle", "start", "__version__"]


if TYPE_CHECKING:
    from .config import RuntimeOptions as RuntimeOptions
    from .domain.models import Edge as Edge
    from .domain.models import Graph as Graph
    from .domain.models import Node as Node
    from .domain.models import Port as Port
    from .execution.listeners import RuntimeHandle as RuntimeHandle
    from .execution.listeners import start as start


def __getattr__(name: str) -> Any:
    if name in {"Graph", "Node", "Edge", "Port"}:
        from .domain import models

        return getattr(models, name)
    if name == "RuntimeOptions":
        from .config import RuntimeOptions

        return RuntimeOptions
    if name in {"RuntimeHandle", "start"}:
        from .execution import listeners

        return getattr(listeners, name)
    raise AttributeError(name)
