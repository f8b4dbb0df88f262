"""Runtime configuration."""

from __future__ import annotations

import time
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field

LogSink = Callable[..., None]

DEFAULT_MOUNT_ID = "cj-ui-overlay"


class RuntimeOptions(BaseModel):
    """Options passed to `start()`.

    The backend and event source are owned by the caller. The engine resolves
    the default mount through `backend.resolve_mount(mount_id)` and never
    creates one itself.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    backend: Any = Field(..., description="EffectBackend implementation")
    events: Any = Field(..., description="EventSource implementation")
    mount_id: str = Field(DEFAULT_MOUNT_ID, description="Mount used when no UI root is wired")
    log: LogSink | None = Field(default=None, description="Called as log(message, data)")
    viewport: tuple[float, float] = Field((1280.0, 720.0), description="Width and height for centre fallback")
    clock: Callable[[], float] = Field(default=time.time, description="Seconds since the epoch")
