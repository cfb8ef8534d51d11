"""Pipeline orchestration."""

from .orchestrator import IngestionOrchestrator, PipelineStage, total_stats

__all__ = ["IngestionOrchestrator", "PipelineStage", "total_stats"]
