"""
Conflict records and availability classification.

Everything here is pure: callers load the rows, these functions only compare
schedule windows. Rows are read by attribute (`id`, `name`, `start_date`, ...)
so ORM instances and plain test doubles both work.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, ClassVar, Iterable, Optional, Union

from .overlap import dates_overlap, hours_overlap


class ConflictType(str, Enum):
    DATE_ONLY = "date_only"
    DATE_AND_TIME = "date_and_time"


class AvailabilityStatus(str, Enum):
    FULLY_AVAILABLE = "fully_available"
    PARTIALLY_AVAILABLE = "partially_available"
    UNAVAILABLE = "unavailable"


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class ScheduleWindow:
    """Inclusive date range plus a half-open hour-of-day range. Any bound may be open."""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_hour: Optional[int] = None
    end_hour: Optional[int] = None

    @classmethod
    def of(cls, entity: Any) -> "ScheduleWindow":
        return cls(entity.start_date, entity.end_date, entity.start_hour, entity.end_hour)

    @classmethod
    def single_day(cls, day: date, start_hour: Optional[int], end_hour: Optional[int]) -> "ScheduleWindow":
        return cls(day, day, start_hour, end_hour)

    def dates_overlap(self, other: "ScheduleWindow") -> bool:
        return dates_overlap(self.start_date, self.end_date, other.start_date, other.end_date)

    def hours_overlap(self, other: "ScheduleWindow") -> bool:
        return hours_overlap(self.start_hour, self.end_hour, other.start_hour, other.end_hour)

    def to_dict(self) -> dict:
        return {
            "startDate": _iso(self.start_date),
            "endDate": _iso(self.end_date),
            "startHour": self.start_hour,
            "endHour": self.end_hour,
        }


@dataclass(frozen=True)
class _ProjectOverlap:
    project_id: str
    project_name: str
    window: ScheduleWindow

    conflict_type: ClassVar[ConflictType]

    def to_dict(self) -> dict:
        return {
            "projectId": self.project_id,
            "projectName": self.project_name,
            **self.window.to_dict(),
            "conflictType": self.conflict_type.value,
        }


@dataclass(frozen=True)
class DateOnlyConflict(_ProjectOverlap):
    """The dates intersect but the hours do not."""

    conflict_type: ClassVar[ConflictType] = ConflictType.DATE_ONLY


@dataclass(frozen=True)
class DateAndTimeConflict(_ProjectOverlap):
    """Both the dates and the hours intersect."""

    conflict_type: ClassVar[ConflictType] = ConflictType.DATE_AND_TIME


ConflictRecord = Union[DateOnlyConflict, DateAndTimeConflict]


def classify_overlap(requested: ScheduleWindow, project: Any) -> Optional[ConflictRecord]:
    """Compare a requested window with a project's window. Hours are only checked on date overlap."""
    existing = ScheduleWindow.of(project)
    if not requested.dates_overlap(existing):
        return None
    if requested.hours_overlap(existing):
        return DateAndTimeConflict(project.id, project.name, existing)
    return DateOnlyConflict(project.id, project.name, existing)


def availability_status(records: Iterable[ConflictRecord]) -> AvailabilityStatus:
    records = list(records)
    if any(isinstance(r, DateAndTimeConflict) for r in records):
        return AvailabilityStatus.UNAVAILABLE
    if records:
        return AvailabilityStatus.PARTIALLY_AVAILABLE
    return AvailabilityStatus.FULLY_AVAILABLE


@dataclass
class MemberAvailability:
    member: Any
    status: AvailabilityStatus
    conflicts: list[ConflictRecord] = field(default_factory=list)


def evaluate_member(
    member: Any,
    requested: ScheduleWindow,
    exclude_project_id: Optional[str] = None,
) -> MemberAvailability:
    """
    Classify one member against a requested window.

    Conflicts are reported for the member's status only: date-and-time records
    for an unavailable member, date-only records for a partially available one.
    """
    records: list[ConflictRecord] = []
    for assignment in member.project_assignments:
        project = assignment.project
        if project is None or project.id == exclude_project_id:
            continue
        record = classify_overlap(requested, project)
        if record is not None:
            records.append(record)

    status = availability_status(records)
    if status is AvailabilityStatus.UNAVAILABLE:
        shown = [r for r in records if isinstance(r, DateAndTimeConflict)]
    elif status is AvailabilityStatus.PARTIALLY_AVAILABLE:
        shown = records
    else:
        shown = []
    return MemberAvailability(member=member, status=status, conflicts=shown)


@dataclass(frozen=True)
class ProjectScheduleConflict:
    """Another project of an assigned member collides with a proposed project window."""

    member_id: str
    member_name: str
    conflicting_project_id: str
    conflicting_project_name: str
    conflicting_project_dates: ScheduleWindow
    new_dates: ScheduleWindow

    def to_dict(self) -> dict:
        return {
            "memberId": self.member_id,
            "memberName": self.member_name,
            "conflictingProjectId": self.conflicting_project_id,
            "conflictingProjectName": self.conflicting_project_name,
            "conflictingProjectDates": self.conflicting_project_dates.to_dict(),
            "newDates": self.new_dates.to_dict(),
        }


def find_project_conflicts(
    assignments: Iterable[Any],
    new_window: ScheduleWindow,
    exclude_project_id: Optional[str] = None,
) -> list[ProjectScheduleConflict]:
    """
    Check project assignments of the affected members against a proposed window.

    A conflict needs both date and hour overlap, the same rule that makes a
    member unavailable in the availability report.
    """
    conflicts = []
    for assignment in assignments:
        project = assignment.project
        if project is None or project.id == exclude_project_id:
            continue
        if isinstance(classify_overlap(new_window, project), DateAndTimeConflict):
            conflicts.append(
                ProjectScheduleConflict(
                    member_id=assignment.member.id,
                    member_name=assignment.member.name,
                    conflicting_project_id=project.id,
                    conflicting_project_name=project.name,
                    conflicting_project_dates=ScheduleWindow.of(project),
                    new_dates=new_window,
                )
            )
    return conflicts


def event_overlaps(event: Any, day: date, start_hour: Optional[int], end_hour: Optional[int]) -> bool:
    """Events are single-day: same date and intersecting half-open hours."""
    return event.date == day and hours_overlap(start_hour, end_hour, event.start_hour, event.end_hour)


@dataclass(frozen=True)
class EventScheduleConflict:
    member_id: str
    member_name: str
    conflicting_event_id: Optional[str]
    conflicting_project_id: Optional[str]
    conflicting_project_name: Optional[str]
    conflicting_event_date: date
    conflicting_event_times: tuple[Optional[int], Optional[int]]
    new_event_times: ScheduleWindow
    conflicting_event_name: Optional[str] = None

    def to_dict(self) -> dict:
        start_hour, end_hour = self.conflicting_event_times
        return {
            "memberId": self.member_id,
            "memberName": self.member_name,
            "conflictingEventId": self.conflicting_event_id,
            "conflictingEventName": self.conflicting_event_name,
            "conflictingProjectId": self.conflicting_project_id,
            "conflictingProjectName": self.conflicting_project_name,
            "conflictingEventDate": self.conflicting_event_date.isoformat(),
            "conflictingEventTimes": {"startHour": start_hour, "endHour": end_hour},
            "newEventTimes": {
                "date": _iso(self.new_event_times.start_date),
                "startHour": self.new_event_times.start_hour,
                "endHour": self.new_event_times.end_hour,
            },
        }


def find_event_conflicts(
    assignments: Iterable[Any],
    day: date,
    start_hour: Optional[int],
    end_hour: Optional[int],
    exclude_event_id: Optional[str] = None,
) -> list[EventScheduleConflict]:
    """Itemize event assignments whose event collides with the proposed single-day window."""
    conflicts = []
    new_times = ScheduleWindow.single_day(day, start_hour, end_hour)
    for assignment in assignments:
        event = assignment.event
        if event is None or event.id == exclude_event_id:
            continue
        if not event_overlaps(event, day, start_hour, end_hour):
            continue
        project = event.project
        conflicts.append(
            EventScheduleConflict(
                member_id=assignment.member.id,
                member_name=assignment.member.name,
                conflicting_event_id=event.id,
                conflicting_project_id=project.id if project else None,
                conflicting_project_name=project.name if project else None,
                conflicting_event_date=event.date,
                conflicting_event_times=(event.start_hour, event.end_hour),
                new_event_times=new_times,
                conflicting_event_name=event.name,
            )
        )
    return conflicts


@dataclass(frozen=True)
class ProposedEvent:
    """An event as it will look once a pending write commits. New events have no id yet."""

    event_id: Optional[str]
    name: str
    member_ids: tuple[str, ...]
    day: date
    start_hour: Optional[int]
    end_hour: Optional[int]


def find_batch_conflicts(
    proposed: Iterable[ProposedEvent],
    member_names: dict[str, str],
    project_id: Optional[str] = None,
    project_name: Optional[str] = None,
) -> list[EventScheduleConflict]:
    """
    Collisions between events written together, judged on their new schedules.

    Each overlapping pair is reported once per shared member, against the later
    event of the pair.
    """
    proposed = list(proposed)
    conflicts = []
    for index, first in enumerate(proposed):
        for second in proposed[index + 1 :]:
            if first.event_id is not None and first.event_id == second.event_id:
                continue
            if first.day != second.day:
                continue
            if not hours_overlap(first.start_hour, first.end_hour, second.start_hour, second.end_hour):
                continue
            new_times = ScheduleWindow.single_day(second.day, second.start_hour, second.end_hour)
            for member_id in first.member_ids:
                if member_id not in second.member_ids:
                    continue
                conflicts.append(
                    EventScheduleConflict(
                        member_id=member_id,
                        member_name=member_names.get(member_id, ""),
                        conflicting_event_id=first.event_id,
                        conflicting_project_id=project_id,
                        conflicting_project_name=project_name,
                        conflicting_event_date=first.day,
                        conflicting_event_times=(first.start_hour, first.end_hour),
                        new_event_times=new_times,
                        conflicting_event_name=first.name,
                    )
                )
    return conflicts
