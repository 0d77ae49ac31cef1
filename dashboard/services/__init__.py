"""Signal services."""

from dashboard.services.base import PipelineService
from dashboard.services.short_term import ShortTermSignalService
from dashboard.services.mid_term import MidTermSignalService

__all__ = [
    "PipelineService",
    "ShortTermSignalService",
    "MidTermSignalService",
]
