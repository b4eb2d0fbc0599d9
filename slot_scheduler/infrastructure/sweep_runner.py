"""Sweep Runner — background asyncio task that fires a sweep tick at a fixed interval.

Invariants:
    - Ticks never overlap: the next tick starts only after the previous one returned
    - A failed tick is logged and the loop keeps going; the next tick re-evaluates from scratch
    - stop() cancels the loop and waits for it to finish

Design Decisions:
    - Plain asyncio task inside the FastAPI lifespan instead of a separate scheduler
      process: single-process deployment, the sweep is idempotent anyway
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class SweepRunner:
    def __init__(self, tick: Callable[[], Awaitable[object]], interval_seconds: float):
        self._tick = tick
        self._interval = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="sweep-runner")
        logger.info(f"Sweep runner started (every {self._interval}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Sweep runner stopped")

    async def _loop(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self._interval)

    async def run_once(self) -> None:
        try:
            await self._tick()
        except Exception as e:
            logger.error(
                f"Sweep tick failed: {e}",
                extra={"error_code": getattr(e, "code", None)},
                exc_info=True,
            )
