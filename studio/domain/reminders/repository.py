"""Custom reminder repository - Database operations for custom reminders"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import CustomReminder, Event, EventAssignment, Project


class CustomReminderRepository:
    """Repository for custom reminder database operations"""

    @staticmethod
    def get_event(db: Session, event_id: str) -> Optional[Event]:
        return (
            db.query(Event)
            .options(joinedload(Event.project))
            .filter(Event.id == event_id)
            .first()
        )

    @staticmethod
    def get_reminder(db: Session, reminder_id: str) -> Optional[CustomReminder]:
        return (
            db.query(CustomReminder)
            .options(joinedload(CustomReminder.event).joinedload(Event.project))
            .filter(CustomReminder.id == reminder_id)
            .first()
        )

    @staticmethod
    def find_at(
        db: Session, event_id: str, day: date, hour: int, exclude_id: Optional[str] = None
    ) -> Optional[CustomReminder]:
        query = db.query(CustomReminder).filter(
            CustomReminder.event_id == event_id,
            CustomReminder.reminder_date == day,
            CustomReminder.reminder_hour == hour,
        )
        if exclude_id:
            query = query.filter(CustomReminder.id != exclude_id)
        return query.first()

    @staticmethod
    def get_event_reminders(db: Session, event_id: str) -> list[CustomReminder]:
        return (
            db.query(CustomReminder)
            .filter(CustomReminder.event_id == event_id)
            .order_by(CustomReminder.reminder_date.asc(), CustomReminder.reminder_hour.asc())
            .all()
        )

    @staticmethod
    def get_company_reminders(db: Session, company_id: str) -> list[CustomReminder]:
        return (
            db.query(CustomReminder)
            .join(CustomReminder.event)
            .join(Event.project)
            .options(joinedload(CustomReminder.event).joinedload(Event.project))
            .filter(Project.company_id == company_id)
            .order_by(CustomReminder.reminder_date.asc(), CustomReminder.reminder_hour.asc())
            .all()
        )

    @staticmethod
    def get_due(db: Session, day: date, hour: int, company_id: Optional[str] = None) -> list[CustomReminder]:
        """Unsent reminders scheduled for exactly `day` at `hour`, with the event's team loaded"""
        query = (
            db.query(CustomReminder)
            .join(CustomReminder.event)
            .join(Event.project)
            .options(
                joinedload(CustomReminder.event).joinedload(Event.project).joinedload(Project.company),
                joinedload(CustomReminder.event).joinedload(Event.assignments).joinedload(EventAssignment.member),
            )
            .filter(
                CustomReminder.reminder_date == day,
                CustomReminder.reminder_hour == hour,
                CustomReminder.is_sent.is_(False),
            )
        )
        if company_id:
            query = query.filter(Project.company_id == company_id)
        return query.all()

    @staticmethod
    def create(db: Session, **reminder_data) -> CustomReminder:
        reminder = CustomReminder(**reminder_data)
        db.add(reminder)
        db.commit()
        db.refresh(reminder)
        return reminder

    @staticmethod
    def save(db: Session, reminder: CustomReminder) -> CustomReminder:
        db.commit()
        db.refresh(reminder)
        return reminder

    @staticmethod
    def delete(db: Session, reminder: CustomReminder) -> None:
        db.delete(reminder)
        db.commit()
