"""
Pipeline Context

Manages pipeline execution context including run ids, logging, and timing.
"""

from __future__ import annotations

import traceback
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Any

import pytz

from core.logging import get_logger
from schemas.pipeline import PipelineResult
from schemas.common import ApiStatus


@dataclass
class PipelineContext:
    """
    Manages pipeline execution context including:
    - Run ID bound to every log line
    - The cycle's reference time ("now"), in the monitor's timezone
    - Timing information
    - Counters for alerts and games

    Usage:
        ctx = PipelineContext("threshold_alerts", timezone="America/New_York")
        ctx.start_tracking()
        try:
            # Do work
            ctx.increment_records(2)
            return ctx.mark_success()
        except Exception as e:
            return ctx.mark_failed(e)
    """

    pipeline_name: str
    timezone: str = "America/New_York"
    now_override: Optional[datetime] = None
    run_id: uuid.UUID = field(default_factory=uuid.uuid4)
    started_at: Optional[datetime] = None
    records_processed: int = 0
    games_checked: int = 0
    games_failed: int = 0
    notified: bool = False

    _log: Any = field(default=None, repr=False)

    def __post_init__(self):
        """Initialize the start time and bound logger."""
        if self.started_at is None:
            self.started_at = datetime.now(pytz.timezone(self.timezone))
        self._log = get_logger("pipeline").bind(
            pipeline=self.pipeline_name,
            run_id=str(self.run_id),
        )

    @property
    def log(self):
        """Get the bound logger for this context."""
        return self._log

    @property
    def now(self) -> datetime:
        """Reference time for this run; pinned by now_override in tests and replays."""
        return self.now_override or self.started_at

    def start_tracking(self) -> None:
        self._log.info("pipeline_started", now=self.now.isoformat())

    def increment_records(self, count: int = 1) -> None:
        """Increment the records processed counter."""
        self.records_processed += count

    def _finish(self) -> tuple[datetime, float]:
        completed_at = datetime.now(pytz.timezone(self.timezone))
        return completed_at, (completed_at - self.started_at).total_seconds()

    def _result(self, status: ApiStatus, message: str, **extra) -> PipelineResult:
        completed_at, duration = self._finish()
        return PipelineResult(
            status=status,
            message=message,
            started_at=self.started_at.isoformat(),
            completed_at=completed_at.isoformat(),
            duration_seconds=duration,
            records_processed=self.records_processed,
            games_checked=self.games_checked,
            games_failed=self.games_failed,
            notified=self.notified,
            **extra,
        )

    def mark_success(self, message: Optional[str] = None) -> PipelineResult:
        """
        Mark pipeline as successful and return result.

        Args:
            message: Optional custom success message
        """
        result = self._result(
            ApiStatus.SUCCESS,
            message or f"{self.pipeline_name} completed successfully",
        )
        self._log.info(
            "pipeline_completed",
            records_processed=self.records_processed,
            games_checked=self.games_checked,
            games_failed=self.games_failed,
            duration_seconds=result.duration_seconds,
        )
        return result

    def mark_skipped(self, reason: str) -> PipelineResult:
        """Mark a run that ended early without doing any work."""
        self._log.info("pipeline_skipped", reason=reason)
        return self._result(ApiStatus.SKIPPED, reason)

    def mark_failed(self, error: Exception) -> PipelineResult:
        """
        Mark pipeline as failed and return error result.

        Args:
            error: The exception that caused the failure
        """
        error_msg = f"{type(error).__name__}: {str(error)}"
        tb = traceback.format_exc()

        self._log.error(
            "pipeline_failed",
            error=error_msg,
            traceback=tb,
        )

        return self._result(
            ApiStatus.ERROR,
            f"{self.pipeline_name} failed",
            error=f"{error_msg}\n{tb}",
        )
