"""Stop-aware waiting for the service loops."""

from __future__ import annotations

import asyncio


async def sleep_until_stopped(stop: asyncio.Event, seconds: float) -> bool:
    """Wait up to *seconds* for *stop*; return ``True`` if it was set."""
    if stop.is_set():
        return True
    try:
        await asyncio.wait_for(stop.wait(), timeout=max(0.0, seconds))
    except asyncio.TimeoutError:
        return False
    return True
