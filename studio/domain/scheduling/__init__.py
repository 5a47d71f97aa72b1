"""
Scheduling Domain

Conflict detection for member assignments:
- overlap.py: date and hour interval overlap, open-ended bounds allowed
- conflicts.py: typed conflict records, availability classification, batch checks
- repository.py: queries feeding the checks, per-member advisory locks
- service.py: availability report, project and event conflict checks
"""

from .conflicts import (
    AvailabilityStatus,
    ConflictRecord,
    ConflictType,
    DateAndTimeConflict,
    DateOnlyConflict,
    EventScheduleConflict,
    ProjectScheduleConflict,
    ProposedEvent,
    ScheduleWindow,
    find_batch_conflicts,
)
from .overlap import dates_overlap, hours_overlap
from .service import SchedulingService

__all__ = [
    "AvailabilityStatus",
    "ConflictRecord",
    "ConflictType",
    "DateAndTimeConflict",
    "DateOnlyConflict",
    "EventScheduleConflict",
    "ProjectScheduleConflict",
    "ProposedEvent",
    "ScheduleWindow",
    "SchedulingService",
    "dates_overlap",
    "find_batch_conflicts",
    "hours_overlap",
]
