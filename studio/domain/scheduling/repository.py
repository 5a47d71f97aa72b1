"""Scheduling repository - Queries feeding the conflict checks"""

import logging
import zlib
from datetime import date
from typing import Iterable, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session, joinedload

from ...models import Company, Event, EventAssignment, Member, Project, ProjectAssignment

logger = logging.getLogger(__name__)


class SchedulingRepository:
    """Repository for schedule lookups"""

    @staticmethod
    def get_company(db: Session, company_id: str) -> Optional[Company]:
        return db.query(Company).filter(Company.id == company_id).first()

    @staticmethod
    def get_company_members_with_assignments(db: Session, company_id: str) -> list[Member]:
        """All members of a company with their project assignments and the projects' windows"""
        return (
            db.query(Member)
            .options(
                joinedload(Member.role),
                joinedload(Member.project_assignments).joinedload(ProjectAssignment.project),
            )
            .filter(Member.company_id == company_id)
            .order_by(Member.name.asc(), Member.id.asc())
            .all()
        )

    @staticmethod
    def get_member_project_assignments(
        db: Session,
        member_ids: Iterable[str],
        exclude_project_id: Optional[str] = None,
        company_id: Optional[str] = None,
    ) -> list[ProjectAssignment]:
        """Project assignments of the given members, optionally excluding one project"""
        member_ids = list(member_ids)
        if not member_ids:
            return []
        query = (
            db.query(ProjectAssignment)
            .join(ProjectAssignment.project)
            .options(joinedload(ProjectAssignment.project), joinedload(ProjectAssignment.member))
            .filter(ProjectAssignment.member_id.in_(member_ids))
        )
        if exclude_project_id:
            query = query.filter(ProjectAssignment.project_id != exclude_project_id)
        if company_id:
            query = query.filter(Project.company_id == company_id)
        return query.all()

    @staticmethod
    def get_member_event_assignments_on(
        db: Session,
        member_ids: Iterable[str],
        day: date,
        exclude_event_id: Optional[str] = None,
        exclude_project_id: Optional[str] = None,
    ) -> list[EventAssignment]:
        """Event assignments of the given members on one calendar date"""
        member_ids = list(member_ids)
        if not member_ids:
            return []
        query = (
            db.query(EventAssignment)
            .join(EventAssignment.event)
            .options(
                joinedload(EventAssignment.event).joinedload(Event.project),
                joinedload(EventAssignment.member),
            )
            .filter(EventAssignment.member_id.in_(member_ids), Event.date == day)
        )
        if exclude_event_id:
            query = query.filter(Event.id != exclude_event_id)
        if exclude_project_id:
            query = query.filter(Event.project_id != exclude_project_id)
        return query.all()

    @staticmethod
    def count_overlapping_events(
        db: Session,
        member_id: str,
        exclude_event_id: Optional[str],
        day: date,
        start_hour: int,
        end_hour: int,
    ) -> int:
        """Other events of a member on `day` whose hours intersect [start_hour, end_hour)"""
        query = (
            db.query(Event)
            .join(Event.assignments)
            .filter(
                EventAssignment.member_id == member_id,
                Event.date == day,
                Event.start_hour < end_hour,
                Event.end_hour > start_hour,
            )
        )
        if exclude_event_id:
            query = query.filter(Event.id != exclude_event_id)
        return query.count()

    @staticmethod
    def lock_members(db: Session, member_ids: Iterable[str]) -> None:
        """
        Serialize schedule writes per member for the rest of the transaction.

        Uses PostgreSQL transaction-scoped advisory locks, taken in sorted order
        so two writers touching the same members cannot deadlock. Other
        dialects have no equivalent and are left unlocked.
        """
        if db.get_bind().dialect.name != "postgresql":
            return
        for member_id in sorted(set(member_ids)):
            key = zlib.crc32(member_id.encode())
            db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": key})
        logger.debug(f"🔒 Locked schedules for {len(set(member_ids))} member(s)")
