"""
Cooperative cancellation points.

A pass runs as a single asyncio task. ``checkpoint()`` gives the event loop a
chance to deliver a pending ``Task.cancel()``; when nothing is pending it
returns immediately. It is only awaited between detector calls, so a pass is
never interrupted in the middle of a detection.
"""
from __future__ import annotations

import asyncio


async def checkpoint() -> None:
    await asyncio.sleep(0)


__all__ = ["checkpoint"]
