"""
Base Pipeline

Abstract base class for monitoring pipelines.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime
from typing import ClassVar, Optional

from core.logging import bind_cycle_context, clear_cycle_context
from pipelines.config import PipelineConfig
from pipelines.context import PipelineContext
from schemas.pipeline import PipelineResult


class PipelineSkipped(Exception):
    """Raised from execute() to end a run early without it counting as a failure."""

    pass


class BasePipeline(ABC):
    """
    Abstract base class for all pipelines.

    Provides:
    - Structured logging with a per-run id
    - Standardized error handling
    - Template method pattern for run lifecycle
    - Thread-based execution to avoid blocking the async event loop

    Subclasses must implement:
    - config: PipelineConfig class attribute
    - execute(): The actual pipeline logic (synchronous)

    Example:
        class ThresholdAlertsPipeline(BasePipeline):
            config = PipelineConfig(
                name="threshold_alerts",
                display_name="Threshold Alerts",
                description="Emails alerts for players clearing stat thresholds",
            )

            def execute(self, ctx: PipelineContext) -> None:
                games = self.scoreboard.get_today_games()
                ctx.increment_records(len(games))
    """

    # Class-level configuration - must be overridden by subclasses
    config: ClassVar[PipelineConfig]

    # Timezone used for run timestamps; subclasses may set it per instance
    timezone: str = "America/New_York"

    def __init__(self):
        """Initialize pipeline and validate configuration."""
        self._validate_config()

    def _validate_config(self) -> None:
        """Validate that config is properly defined."""
        if not hasattr(self.__class__, "config") or self.__class__.config is None:
            raise ValueError(
                f"{self.__class__.__name__} must define a 'config' class attribute"
            )

    @abstractmethod
    def execute(self, ctx: PipelineContext) -> None:
        """
        Execute the pipeline logic.

        Runs in a worker thread, so blocking HTTP calls are safe here.

        Args:
            ctx: Pipeline context with logging, counters, and timing

        Raises:
            PipelineSkipped to end the run early; any other exception is
            caught and converted to a failed result
        """
        pass

    def _run_sync(self, now: Optional[datetime] = None) -> PipelineResult:
        """
        Run the full pipeline lifecycle synchronously.

        Called via asyncio.to_thread() from run() so that blocking HTTP
        requests execute in a thread pool worker instead of on the event loop.
        """
        ctx = PipelineContext(self.config.name, timezone=self.timezone, now_override=now)
        bind_cycle_context(run_id=str(ctx.run_id))
        ctx.start_tracking()

        try:
            self.before_execute(ctx)
            self.execute(ctx)
            self.after_execute(ctx)
            return ctx.mark_success()
        except PipelineSkipped as e:
            return ctx.mark_skipped(str(e))
        except Exception as e:
            return ctx.mark_failed(e)
        finally:
            clear_cycle_context()

    def run_sync(self, now: Optional[datetime] = None) -> PipelineResult:
        """Run the pipeline in the calling thread."""
        return self._run_sync(now)

    async def run(self, now: Optional[datetime] = None) -> PipelineResult:
        """
        Run the pipeline with full lifecycle management.

        This is the public entry point. Execution runs in a thread pool
        worker via asyncio.to_thread() to avoid blocking the event loop.

        Args:
            now: If provided, the run uses this time instead of the current
                 time. Useful for tests and replays.

        Returns:
            PipelineResult with status, timing, and records processed
        """
        return await asyncio.to_thread(self._run_sync, now)

    def before_execute(self, ctx: PipelineContext) -> None:
        """
        Hook called before execute().

        Override for validation or setup tasks.
        """
        pass

    def after_execute(self, ctx: PipelineContext) -> None:
        """
        Hook called after successful execute().

        Override for cleanup tasks.
        """
        pass

    @classmethod
    def get_name(cls) -> str:
        """Get the pipeline name from config."""
        return cls.config.name

    @classmethod
    def get_info(cls) -> dict:
        """Get pipeline information for listing."""
        return {
            "name": cls.config.name,
            "display_name": cls.config.display_name,
            "description": cls.config.description,
        }

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.config.name})>"
