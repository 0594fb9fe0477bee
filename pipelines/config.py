"""
Pipeline Configuration

Immutable configuration dataclass for pipeline metadata.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PipelineConfig:
    """
    Immutable configuration for a pipeline.

    Attributes:
        name: Internal name used for logging (e.g., "threshold_alerts")
        display_name: Human-readable name (e.g., "Threshold Alerts")
        description: What this pipeline does
    """

    name: str
    display_name: str
    description: str

    def __post_init__(self):
        """Validate configuration."""
        if not self.name:
            raise ValueError("Pipeline name is required")
