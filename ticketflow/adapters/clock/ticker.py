"""
Clock ticker adapter - pushes one-second ticks into live flows.

A single background task per ticker calls the supplied callback at a
fixed interval. start() is idempotent, so there is never more than one
ticking loop for the timers it drives.
"""

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class Ticker:
    """Calls on_tick every interval seconds until stopped."""

    def __init__(self, on_tick: Callable[[], None], interval: float = 1.0) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        self._on_tick = on_tick
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking on the running event loop; no-op if already started."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self._on_tick()
            except Exception:
                logger.exception("Tick callback failed")
