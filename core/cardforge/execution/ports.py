"""Port value cache."""

from __future__ import annotations

import sys
from typing import Any, Iterator


class _Absent:
    """Marker for "no value published yet", distinct from None/0/""."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT: Any = _Absent()


class ValueCache:
    """Per-run store of published port values keyed by (node_id, port_id).

    Writes overwrite; nothing is ever evicted. `writes` counts every write so
    memoization can be observed.
    """

    def __init__(self) -> None:
        self.values: dict[tuple[str, str], Any] = {}  # (node_id, port_id) → value
        self.writes = 0

    def set_value(self, node_id: str, port_id: str, value: Any) -> None:
        """Publish a port value."""
        self.values[(node_id, port_id)] = value
        self.writes += 1
        sys.stderr.write(f"[CACHE] Set {node_id}.{port_id} = {type(value).__name__}\n")
        sys.stderr.flush()

    def get_value(self, node_id: str, port_id: str) -> Any:
        """Get a port value, or ABSENT if nothing was published."""
        return self.values.get((node_id, port_id), ABSENT)

    def has_value(self, node_id: str, port_id: str) -> bool:
        return (node_id, port_id) in self.values

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[tuple[str, str, Any]]:
        """Yield `(node_id, port_id, value)` in order of first publication."""
        for (node_id, port_id), value in self.values.items():
            yield node_id, port_id, value
