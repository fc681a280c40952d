"""
Pydantic models for Greenleaf Bookings.
"""

from core.models.booking import (
    Actor,
    BookingEvent,
    BookingRecord,
    BookingSubmission,
    EventType,
    JobState,
    Metrics,
    Stage,
    StageEntry,
    Terms,
)
from core.models.index import ExportRow, IndexEntry

__all__ = [
    "Actor",
    "BookingEvent",
    "BookingRecord",
    "BookingSubmission",
    "EventType",
    "ExportRow",
    "IndexEntry",
    "JobState",
    "Metrics",
    "Stage",
    "StageEntry",
    "Terms",
]
