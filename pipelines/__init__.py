"""
Pipeline Exports

Provides the monitoring pipeline and a helper for building it from settings.
"""

from typing import Optional

from core.settings import Settings
from pipelines.base import BasePipeline, PipelineSkipped
from pipelines.config import PipelineConfig
from pipelines.context import PipelineContext
from pipelines.threshold_alerts import ThresholdAlertsPipeline
from services.notification_service import NotificationService
from services.roster_service import RosterSet


def build_monitor_pipeline(
    settings: Settings,
    notifier: NotificationService,
    roster: Optional[RosterSet] = None,
) -> ThresholdAlertsPipeline:
    """
    Build the threshold alerts pipeline with its ESPN extractor.

    Args:
        settings: Loaded monitor settings
        notifier: Configured notification service
        roster: Rostered player ids; None disables availability filtering
    """
    return ThresholdAlertsPipeline.from_settings(settings, notifier=notifier, roster=roster)


__all__ = [
    "BasePipeline",
    "PipelineConfig",
    "PipelineContext",
    "PipelineSkipped",
    "ThresholdAlertsPipeline",
    "build_monitor_pipeline",
]
