"""Event service - Business logic for single project events"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import CurrentAccount
from ...errors import NotFoundError, ScheduleConflictError
from ...models import Event, EventAssignment, ProjectAssignment, default_reminders
from ...services.calendar_sync import calendar_entries, push_event, remove_calendar_entries
from ..projects.repository import ProjectRepository
from ..projects.service import notify_assignments, resolve_people, serialize_event
from ..scheduling import SchedulingService
from .repository import EventRepository
from .schemas import EventCreate, EventUpdate

logger = logging.getLogger(__name__)

MEMBERS_UNAVAILABLE_MESSAGE = "Assigned team members are not available at the new schedule"


class EventService:
    """Service layer for event business logic"""

    def __init__(self, db: Session, calendar_service=None, scheduling: Optional[SchedulingService] = None):
        self.db = db
        self.repo = EventRepository()
        self.calendar = calendar_service
        self.scheduling = scheduling or SchedulingService(db)

    def get_event_for(self, event_id: str, account: CurrentAccount) -> Event:
        event = self.repo.get_event(self.db, event_id)
        if not event:
            raise NotFoundError("Event not found")
        account.ensure_company(event.project.company_id)
        return event

    def get_event(self, event_id: str, account: CurrentAccount) -> dict:
        event = self.get_event_for(event_id, account)
        return {"success": True, "event": serialize_event(event)}

    async def create_event(self, data: EventCreate, account: CurrentAccount) -> dict:
        account.ensure_company(data.companyId)
        account.ensure_manager()
        project = self.repo.get_company_project(self.db, data.projectId, data.companyId)
        if not project:
            raise NotFoundError("Project not found or doesn't belong to the specified company")

        members, _roles = resolve_people(ProjectRepository(), self.db, project.company_id, data.assignments)
        self.scheduling.lock_members(members.keys())
        conflicts = self.scheduling.find_event_schedule_conflicts(
            data.member_ids(), data.date, data.startHour, data.endHour
        )
        if conflicts:
            logger.warning(f"⚠️ Event create rejected for project {project.id}: {len(conflicts)} conflict(s)")
            raise ScheduleConflictError("Schedule conflict detected", [c.to_dict() for c in conflicts])

        event = Event(
            project_id=project.id,
            name=data.name,
            date=data.date,
            start_hour=data.startHour,
            end_hour=data.endHour,
            location=data.location or project.location,
            reminders={**default_reminders(), **(data.reminders or {})},
        )
        seen = set()
        for item in data.assignments:
            if item.memberId in seen:
                continue
            seen.add(item.memberId)
            event.assignments.append(
                EventAssignment(member_id=item.memberId, role_id=item.roleId, instructions=item.instructions)
            )
            if not any(a.member_id == item.memberId for a in project.assignments):
                project.assignments.append(ProjectAssignment(member_id=item.memberId, role_id=item.roleId))

        self.db.add(event)
        self.db.commit()
        logger.info(f"✅ Event created: {event.name} ({event.id}) in project {project.id}")

        event = self.repo.get_event(self.db, event.id)
        if self.calendar is not None:
            await push_event(self.db, self.calendar, event)
        await notify_assignments(event.assignments, event.project)

        return {
            "success": True,
            "message": "Event created successfully",
            "eventId": event.id,
            "event": serialize_event(event),
        }

    async def update_event(self, event_id: str, data: EventUpdate, account: CurrentAccount) -> dict:
        """
        Update an event. A changed date or hour window is checked against
        every assigned member's other events before anything is written.
        """
        event = self.get_event_for(event_id, account)
        account.ensure_manager()
        fields = data.model_fields_set

        new_date = data.date if data.date is not None else event.date
        if data.startHour is not None:
            new_start, new_end = data.startHour, data.endHour
        else:
            new_start, new_end = event.start_hour, event.end_hour

        schedule_changed = (
            new_date != event.date or new_start != event.start_hour or new_end != event.end_hour
        )
        if schedule_changed and event.assignments:
            member_ids = [a.member_id for a in event.assignments]
            self.scheduling.lock_members(member_ids)
            unavailable = [
                member_id
                for member_id in member_ids
                if not self.scheduling.is_member_available(member_id, event.id, new_date, new_start, new_end)
            ]
            if unavailable:
                logger.warning(f"⚠️ Event {event.id} reschedule rejected: {len(unavailable)} member(s) busy")
                raise ScheduleConflictError(MEMBERS_UNAVAILABLE_MESSAGE)

        details_changed = False
        if "name" in fields and data.name and data.name.strip() != event.name:
            event.name = data.name.strip()
            details_changed = True
        if "location" in fields and data.location != event.location:
            event.location = data.location
            details_changed = True
        event.date, event.start_hour, event.end_hour = new_date, new_start, new_end
        if data.reminders:
            event.reminders = {**(event.reminders or default_reminders()), **data.reminders}

        self.db.commit()
        logger.info(f"✅ Event updated: {event.id}")

        event = self.repo.get_event(self.db, event.id)
        if (schedule_changed or details_changed) and self.calendar is not None:
            await push_event(self.db, self.calendar, event)

        return {
            "success": True,
            "message": "Event updated successfully",
            "eventId": event.id,
            "event": serialize_event(event),
        }

    async def delete_event(self, event_id: str, account: CurrentAccount) -> dict:
        event = self.get_event_for(event_id, account)
        account.ensure_manager()

        entries = calendar_entries(event.assignments)
        self.repo.delete_event(self.db, event)
        logger.info(f"🗑️ Event deleted: {event_id}")

        if entries and self.calendar is not None:
            await remove_calendar_entries(self.calendar, entries)
        return {"success": True, "message": "Event deleted successfully"}
