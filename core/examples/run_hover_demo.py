#!/usr/bin/env python3
"""Demo script: run the hover -> flying emoji graph against the headless host.

Fires the hover target twice, the second time while the first emoji is still
flying, to show two pulses interleaving.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Add core to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cardforge.config import RuntimeOptions
from cardforge.execution.listeners import start
from cardforge.host import HeadlessHost
from cardforge.samples import make_hover_emoji_demo_graph


async def demo() -> None:
    print("=" * 60)
    print("CardForge Runtime - Hover Demo")
    print("=" * 60)

    host = HeadlessHost(time_scale=0.2)
    host.add_target("#hoverTarget")

    def log(message: str, data: object = None) -> None:
        print(f"  {message}" + (f"  {data}" if data is not None else ""))

    handle = start(make_hover_emoji_demo_graph(), RuntimeOptions(backend=host, events=host, log=log))

    print("\n▶ Hover at (200, 300)")
    host.fire("#hoverTarget", x=200, y=300)
    await asyncio.sleep(0.05)

    print("\n▶ Hover again at (640, 360) while the first emoji is in flight")
    host.fire("#hoverTarget", x=640, y=360)

    await handle.wait_idle()
    handle.stop()

    print("\n" + "─" * 60)
    print(f"  Elements created: {len(host.elements)}")
    print(f"  Still mounted:    {len(host.live_elements('cj-ui-overlay'))}")
    print("─" * 60)


if __name__ == "__main__":
    asyncio.run(demo())
