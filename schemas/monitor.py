"""
Monitor Status Schemas

Pydantic models for the control API status endpoint.
"""

from typing import Optional

from pydantic import BaseModel

from schemas.pipeline import PipelineResult


class MonitorStatusData(BaseModel):
    """Data payload for GET /v1/monitor/status."""

    pipeline: dict
    running: bool
    cycle_in_progress: bool
    within_game_window: bool
    check_interval_minutes: float
    roster_size: int
    alerted_keys: int
    cycles_started: int = 0
    cycles_skipped: int = 0
    last_result: Optional[PipelineResult] = None


class MonitorStatusResponse(BaseModel):
    """Response for GET /v1/monitor/status."""

    status: str
    message: str
    data: MonitorStatusData


class HealthResponse(BaseModel):
    status: str
    timestamp: str
