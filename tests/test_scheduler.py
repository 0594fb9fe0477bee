import asyncio

from core.scheduler import MonitorScheduler
from schemas.pipeline import PipelineResult


class SlowPipeline:
    """Pipeline stand-in whose run blocks until released."""

    def __init__(self):
        self.calls = 0
        self.release = asyncio.Event()

    @classmethod
    def get_name(cls) -> str:
        return "slow"

    async def run(self, now=None) -> PipelineResult:
        self.calls += 1
        await self.release.wait()
        return PipelineResult(status="success", message="done", started_at="2025-01-15T20:00:00-05:00")


async def test_trigger_skips_while_cycle_running():
    pipeline = SlowPipeline()
    scheduler = MonitorScheduler(pipeline, interval_minutes=5)

    first = asyncio.create_task(scheduler.trigger())
    await asyncio.sleep(0)
    assert scheduler.cycle_in_progress

    assert await scheduler.trigger() is None
    assert scheduler.cycles_skipped == 1

    pipeline.release.set()
    result = await first

    assert result.status == "success"
    assert scheduler.last_result is result
    assert scheduler.cycles_started == 1
    assert pipeline.calls == 1
    assert not scheduler.cycle_in_progress


async def test_run_forever_overrunning_cycle_skips_ticks():
    pipeline = SlowPipeline()
    scheduler = MonitorScheduler(pipeline, interval_minutes=0.01 / 60)

    loop_task = asyncio.create_task(scheduler.run_forever())
    await asyncio.sleep(0.05)
    assert scheduler.running

    scheduler.stop()
    await loop_task
    pipeline.release.set()
    await scheduler.wait_idle()

    assert pipeline.calls == 1
    assert scheduler.cycles_started == 1
    assert scheduler.cycles_skipped >= 1
    assert not scheduler.running


async def test_run_forever_runs_first_cycle_immediately():
    pipeline = SlowPipeline()
    pipeline.release.set()
    scheduler = MonitorScheduler(pipeline, interval_minutes=5)

    loop_task = asyncio.create_task(scheduler.run_forever())
    await asyncio.sleep(0.01)
    scheduler.stop()
    await loop_task
    await scheduler.wait_idle()

    assert pipeline.calls == 1
    assert scheduler.last_result.message == "done"
