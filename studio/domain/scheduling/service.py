"""Scheduling service - Availability reports and schedule conflict checks"""

import logging
from collections import Counter
from datetime import date
from typing import Any, Callable, Iterable, Optional

from sqlalchemy.orm import Session

from ...errors import NotFoundError
from .conflicts import (
    AvailabilityStatus,
    EventScheduleConflict,
    ProjectScheduleConflict,
    ScheduleWindow,
    evaluate_member,
    find_event_conflicts,
    find_project_conflicts,
)
from .repository import SchedulingRepository
from .schemas import AvailabilityRequest

logger = logging.getLogger(__name__)


def _member_profile(member: Any, photo_url: Optional[str]) -> dict:
    return {
        "id": member.id,
        "profilePhoto": photo_url,
        "name": member.name,
        "email": member.email,
        "role": member.role.name if member.role else "",
        "phone": member.phone or "",
        "countryCode": member.country_code or "",
        "location": member.location or "",
        "bio": member.bio or "",
        "skills": member.skills or [],
    }


class SchedulingService:
    """
    Availability and conflict checks over freshly loaded rows.

    The repository is injectable so the checks can run against in-memory
    doubles. Nothing here mutates state.
    """

    def __init__(
        self,
        db: Optional[Session],
        repo: Optional[SchedulingRepository] = None,
        photo_url: Optional[Callable[[str], Optional[str]]] = None,
    ):
        self.db = db
        self.repo = repo or SchedulingRepository()
        self.photo_url = photo_url

    def get_available_members(self, request: AvailabilityRequest) -> dict:
        """Classify every member of a company against the requested window"""
        company = self.repo.get_company(self.db, request.companyId)
        if not company:
            raise NotFoundError("Company not found")

        window = ScheduleWindow(request.startDate, request.endDate, request.startHour, request.endHour)
        members = self.repo.get_company_members_with_assignments(self.db, company.id)

        available_members = []
        for member in members:
            result = evaluate_member(member, window, request.excludeProjectId)
            photo = None
            if member.profile_photo and self.photo_url:
                photo = self.photo_url(member.profile_photo)
            available_members.append(
                {
                    **_member_profile(member, photo),
                    "availabilityStatus": result.status.value,
                    "conflicts": [record.to_dict() for record in result.conflicts],
                }
            )

        counts = Counter(m["availabilityStatus"] for m in available_members)
        logger.info(
            f"📅 Availability for company {company.id} {window.start_date}..{window.end_date} "
            f"{window.start_hour}-{window.end_hour}: {dict(counts)}"
        )

        return {
            "success": True,
            "message": "Available members retrieved successfully",
            "data": {
                "availableMembers": available_members,
                "totalFullyAvailable": counts[AvailabilityStatus.FULLY_AVAILABLE.value],
                "totalPartiallyAvailable": counts[AvailabilityStatus.PARTIALLY_AVAILABLE.value],
                "totalUnavailable": counts[AvailabilityStatus.UNAVAILABLE.value],
                "totalMembers": len(members),
                "dateRange": {
                    "startDate": request.startDate.isoformat(),
                    "endDate": request.endDate.isoformat(),
                    "startHour": request.startHour,
                    "endHour": request.endHour,
                },
            },
        }

    def find_project_schedule_conflicts(
        self,
        project_id: str,
        member_ids: Iterable[str],
        new_window: ScheduleWindow,
        company_id: Optional[str] = None,
    ) -> list[ProjectScheduleConflict]:
        """Other projects of the given members that would collide with `new_window`"""
        assignments = self.repo.get_member_project_assignments(
            self.db, member_ids, exclude_project_id=project_id, company_id=company_id
        )
        return find_project_conflicts(assignments, new_window, exclude_project_id=project_id)

    def find_event_schedule_conflicts(
        self,
        member_ids: Iterable[str],
        day: date,
        start_hour: Optional[int],
        end_hour: Optional[int],
        exclude_event_id: Optional[str] = None,
        exclude_project_id: Optional[str] = None,
    ) -> list[EventScheduleConflict]:
        """Itemized event collisions for the given members on one day"""
        assignments = self.repo.get_member_event_assignments_on(
            self.db,
            member_ids,
            day,
            exclude_event_id=exclude_event_id,
            exclude_project_id=exclude_project_id,
        )
        return find_event_conflicts(assignments, day, start_hour, end_hour, exclude_event_id)

    def is_member_available(
        self,
        member_id: str,
        exclude_event_id: Optional[str],
        day: date,
        start_hour: int,
        end_hour: int,
    ) -> bool:
        """True when the member has no other event on `day` overlapping the hours"""
        overlapping = self.repo.count_overlapping_events(
            self.db, member_id, exclude_event_id, day, start_hour, end_hour
        )
        return overlapping == 0

    def lock_members(self, member_ids: Iterable[str]) -> None:
        self.repo.lock_members(self.db, member_ids)
