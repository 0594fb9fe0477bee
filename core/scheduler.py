"""
Monitor Scheduler

Runs a pipeline on a fixed interval inside the asyncio event loop and
guarantees at most one run at a time. Ticks (or manual triggers) that arrive
while a run is in progress are skipped, not queued.
"""

import asyncio
from datetime import datetime
from typing import Optional

from core.logging import get_logger
from pipelines.base import BasePipeline
from schemas.pipeline import PipelineResult


class MonitorScheduler:
    """
    Fixed-rate scheduler with an in-progress guard.

    State is in memory only (single-process deployment).
    """

    def __init__(self, pipeline: BasePipeline, interval_minutes: float):
        self.pipeline = pipeline
        self.interval_seconds = interval_minutes * 60
        self.interval_minutes = interval_minutes
        self.last_result: Optional[PipelineResult] = None
        self.cycles_started = 0
        self.cycles_skipped = 0

        self._lock = asyncio.Lock()
        self._stopped = asyncio.Event()
        self._running = False
        self._tasks: set[asyncio.Task] = set()
        self._log = get_logger("scheduler")

    @property
    def running(self) -> bool:
        return self._running

    @property
    def cycle_in_progress(self) -> bool:
        return self._lock.locked()

    async def trigger(self, now: Optional[datetime] = None) -> Optional[PipelineResult]:
        """
        Run one cycle unless one is already running.

        Returns:
            The cycle result, or None if skipped because a cycle was running
        """
        if self._lock.locked():
            self.cycles_skipped += 1
            self._log.warning(
                "cycle_skipped_already_running",
                pipeline=self.pipeline.get_name(),
            )
            return None

        async with self._lock:
            self.cycles_started += 1
            result = await self.pipeline.run(now)
            self.last_result = result
            return result

    def _spawn_cycle(self) -> None:
        task = asyncio.create_task(self.trigger())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def run_forever(self) -> None:
        """
        Run a cycle now, then once per interval until stop() is called.

        Ticks are scheduled at a fixed rate from the start time; a cycle that
        overruns the interval causes the overlapping tick to be skipped.
        """
        loop = asyncio.get_running_loop()
        self._running = True
        self._stopped.clear()
        self._log.info(
            "scheduler_started",
            pipeline=self.pipeline.get_name(),
            interval_minutes=self.interval_minutes,
        )

        next_tick = loop.time()
        try:
            while not self._stopped.is_set():
                self._spawn_cycle()
                next_tick += self.interval_seconds
                delay = max(0.0, next_tick - loop.time())
                try:
                    await asyncio.wait_for(self._stopped.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    pass
        finally:
            self._running = False
            self._log.info("scheduler_stopped", cycles_started=self.cycles_started)

    def stop(self) -> None:
        self._stopped.set()

    async def wait_idle(self) -> None:
        """Wait for any spawned cycles to finish."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
