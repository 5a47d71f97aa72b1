"""Event repository - Database operations for events"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Event, EventAssignment, Project


class EventRepository:
    """Repository for event database operations"""

    @staticmethod
    def get_event(db: Session, event_id: str) -> Optional[Event]:
        return (
            db.query(Event)
            .options(
                joinedload(Event.project).joinedload(Project.company),
                joinedload(Event.assignments).joinedload(EventAssignment.member),
                joinedload(Event.assignments).joinedload(EventAssignment.role),
            )
            .filter(Event.id == event_id)
            .first()
        )

    @staticmethod
    def get_company_project(db: Session, project_id: str, company_id: str) -> Optional[Project]:
        return (
            db.query(Project)
            .options(joinedload(Project.company), joinedload(Project.assignments))
            .filter(Project.id == project_id, Project.company_id == company_id)
            .first()
        )

    @staticmethod
    def delete_event(db: Session, event: Event) -> None:
        """Delete an event. Its assignments and custom reminders cascade."""
        db.delete(event)
        db.commit()
