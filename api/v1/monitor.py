"""
Monitor API Routes

Token-authenticated endpoints for inspecting the running monitor and
triggering a cycle by hand. Manual triggers share the scheduler's
in-progress guard, so they never overlap a scheduled cycle.
"""

from fastapi import APIRouter, HTTPException, Request, Security

from core.logging import get_logger
from core.pipeline_auth import verify_pipeline_token
from core.scheduler import MonitorScheduler
from schemas.common import ApiStatus, error_response
from schemas.monitor import MonitorStatusData, MonitorStatusResponse
from schemas.pipeline import PipelineResponse
from services.schedule_service import is_within_game_time

router = APIRouter(prefix="/monitor", tags=["monitor"])
log = get_logger("monitor_api")


def get_scheduler(request: Request) -> MonitorScheduler:
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        raise HTTPException(status_code=503, detail="Monitor is not running")
    return scheduler


def _cycle_in_progress() -> HTTPException:
    return HTTPException(
        status_code=409,
        detail=error_response(
            message="A monitoring cycle is already in progress",
            status=ApiStatus.CONFLICT,
        ),
    )


@router.get("/status", response_model=MonitorStatusResponse)
async def get_monitor_status(
    request: Request,
    _: str = Security(verify_pipeline_token),
) -> MonitorStatusResponse:
    """
    Report scheduler state, the last cycle result, roster size and the
    number of alert keys held for today.
    """
    scheduler = get_scheduler(request)
    pipeline = scheduler.pipeline

    data = MonitorStatusData(
        pipeline=pipeline.get_info(),
        running=scheduler.running,
        cycle_in_progress=scheduler.cycle_in_progress,
        within_game_window=is_within_game_time(pipeline.window),
        check_interval_minutes=scheduler.interval_minutes,
        roster_size=len(pipeline.roster),
        alerted_keys=len(pipeline.deduplicator),
        cycles_started=scheduler.cycles_started,
        cycles_skipped=scheduler.cycles_skipped,
        last_result=scheduler.last_result,
    )
    return MonitorStatusResponse(
        status=ApiStatus.SUCCESS.value,
        message="Monitor status retrieved",
        data=data,
    )


@router.post("/cycles", response_model=PipelineResponse)
async def trigger_cycle(
    request: Request,
    _: str = Security(verify_pipeline_token),
) -> PipelineResponse:
    """
    Run one monitoring cycle now and return its result.

    Returns 409 if a cycle (scheduled or manual) is already running.
    """
    scheduler = get_scheduler(request)
    if scheduler.cycle_in_progress:
        raise _cycle_in_progress()

    log.info("manual_cycle_requested")
    result = await scheduler.trigger()
    if result is None:
        raise _cycle_in_progress()

    return PipelineResponse(
        status=result.status,
        message=result.message,
        data=result,
    )
