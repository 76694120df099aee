"""Recurring refresh timer for the dashboard."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Run a refresh callback every `interval` seconds until stopped.

    The first tick fires one interval after start. A failing tick is logged
    and does not stop the loop. stop() cancels the pending tick, so nothing
    stays scheduled afterwards.
    """

    def __init__(
        self, callback: Callable[[], Awaitable[object]], interval: float
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.interval = interval
        self._callback = callback
        self._running = False
        self._task: asyncio.Task[None] | None = None
        self._ticks: int = 0

    def start(self) -> asyncio.Task[None]:
        """Start ticking. Returns the running task (idempotent)."""
        if self._running and self._task is not None:
            return self._task

        self._running = True
        self._task = asyncio.create_task(self._tick_loop())
        logger.info("Auto refresh started (every %ss)", self.interval)
        return self._task

    async def _tick_loop(self) -> None:
        """Main scheduling loop."""
        while self._running:
            try:
                await asyncio.sleep(self.interval)
                self._ticks += 1
                await self._callback()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Scheduled refresh #%d failed", self._ticks)

    def stop(self) -> None:
        """Stop ticking and cancel any pending tick."""
        if not self._running:
            return
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None
        logger.info("Auto refresh stopped after %d ticks", self._ticks)

    @property
    def is_running(self) -> bool:
        """Check if the scheduler is running."""
        return self._running

    @property
    def ticks(self) -> int:
        """Number of ticks fired since construction."""
        return self._ticks
