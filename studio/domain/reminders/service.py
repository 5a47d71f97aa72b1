"""Custom reminder service - One-off reminders members receive before an event"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...auth import CurrentAccount
from ...errors import NotFoundError, ValidationFailed
from ...models import CustomReminder, Event
from .repository import CustomReminderRepository
from .schemas import CustomReminderCreate, CustomReminderUpdate

logger = logging.getLogger(__name__)


def serialize_reminder(reminder: CustomReminder) -> dict:
    event = reminder.event
    return {
        "id": reminder.id,
        "eventId": reminder.event_id,
        "eventName": event.name if event else None,
        "projectId": event.project_id if event else None,
        "reminderDate": reminder.reminder_date.isoformat(),
        "reminderHour": reminder.reminder_hour,
        "message": reminder.message,
        "isSent": reminder.is_sent,
        "sentAt": reminder.sent_at.isoformat() if reminder.sent_at else None,
    }


def check_before_event(event: Event, day: date, hour: int) -> None:
    """The reminder must fire strictly before the event starts"""
    reminder_at = datetime.combine(day, time(hour))
    event_at = datetime.combine(event.date, time()) + timedelta(hours=event.start_hour or 0)
    if reminder_at >= event_at:
        raise ValidationFailed("Reminder must be set before the event starts")


class CustomReminderService:
    """Service layer for custom reminder business logic"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self.repo = CustomReminderRepository()
        self.clock = clock

    def _get_event(self, event_id: str, account: CurrentAccount) -> Event:
        event = self.repo.get_event(self.db, event_id)
        if not event:
            raise NotFoundError("Event not found")
        account.ensure_company(event.project.company_id)
        return event

    def _get_reminder(self, reminder_id: str, account: CurrentAccount) -> CustomReminder:
        reminder = self.repo.get_reminder(self.db, reminder_id)
        if not reminder or reminder.event.project.company_id != account.company_id:
            raise NotFoundError("Custom reminder not found")
        return reminder

    def create_reminder(self, data: CustomReminderCreate, account: CurrentAccount) -> dict:
        event = self._get_event(data.eventId, account)
        check_before_event(event, data.reminderDate, data.reminderHour)
        if self.repo.find_at(self.db, event.id, data.reminderDate, data.reminderHour):
            raise ValidationFailed("A reminder already exists for this date and time")

        reminder = self.repo.create(
            self.db,
            event_id=event.id,
            reminder_date=data.reminderDate,
            reminder_hour=data.reminderHour,
            message=data.message,
        )
        logger.info(
            f"⏰ Custom reminder {reminder.id} set for event {event.id} "
            f"at {reminder.reminder_date} {reminder.reminder_hour}:00"
        )
        return {
            "success": True,
            "message": "Custom reminder created successfully",
            "customReminder": serialize_reminder(reminder),
        }

    def list_event_reminders(self, event_id: str, account: CurrentAccount) -> dict:
        event = self._get_event(event_id, account)
        reminders = self.repo.get_event_reminders(self.db, event.id)
        return {
            "success": True,
            "message": "Custom reminders retrieved successfully",
            "customReminders": [serialize_reminder(r) for r in reminders],
        }

    def list_company_reminders(self, account: CurrentAccount) -> dict:
        reminders = self.repo.get_company_reminders(self.db, account.company_id)
        return {
            "success": True,
            "message": "All custom reminders retrieved successfully",
            "customReminders": [serialize_reminder(r) for r in reminders],
        }

    def update_reminder(self, reminder_id: str, data: CustomReminderUpdate, account: CurrentAccount) -> dict:
        reminder = self._get_reminder(reminder_id, account)
        fields = data.model_fields_set

        if data.reminderDate is not None or data.reminderHour is not None:
            new_date = data.reminderDate if data.reminderDate is not None else reminder.reminder_date
            new_hour = data.reminderHour if data.reminderHour is not None else reminder.reminder_hour
            check_before_event(reminder.event, new_date, new_hour)
            if self.repo.find_at(self.db, reminder.event_id, new_date, new_hour, exclude_id=reminder.id):
                raise ValidationFailed("Another reminder already exists for this date and time")

            if (new_date, new_hour) != (reminder.reminder_date, reminder.reminder_hour):
                # a moved reminder fires again
                reminder.is_sent = False
                reminder.sent_at = None
            reminder.reminder_date = new_date
            reminder.reminder_hour = new_hour

        if "message" in fields:
            reminder.message = data.message

        reminder = self.repo.save(self.db, reminder)
        return {
            "success": True,
            "message": "Custom reminder updated successfully",
            "customReminder": serialize_reminder(reminder),
        }

    def delete_reminder(self, reminder_id: str, account: CurrentAccount) -> dict:
        reminder = self._get_reminder(reminder_id, account)
        self.repo.delete(self.db, reminder)
        return {"success": True, "message": "Custom reminder deleted successfully"}

    def toggle_sent(self, reminder_id: str, is_sent: bool, account: CurrentAccount) -> dict:
        reminder = self._get_reminder(reminder_id, account)
        reminder.is_sent = is_sent
        reminder.sent_at = self.clock() if is_sent else None
        reminder = self.repo.save(self.db, reminder)
        return {
            "success": True,
            "message": "Custom reminder marked as sent" if is_sent else "Custom reminder marked as unsent",
            "customReminder": serialize_reminder(reminder),
        }

    def list_pending(self, account: CurrentAccount, now: Optional[datetime] = None) -> dict:
        """Unsent reminders due in the current hour"""
        now = now or self.clock()
        reminders = self.repo.get_due(self.db, now.date(), now.hour, company_id=account.company_id)
        return {
            "success": True,
            "message": "Pending custom reminders retrieved successfully",
            "reminders": [serialize_reminder(r) for r in reminders],
            "count": len(reminders),
        }
