"""
Calendar fan-out for committed schedule changes.

These helpers run after the database commit. Every failure is logged and
swallowed: Google Calendar mirrors the schedule, it never decides it.
"""

import logging
from typing import Iterable

from fastapi import Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Event
from .google_calendar_service import GoogleCalendarService

logger = logging.getLogger(__name__)


def get_calendar_service(db: Session = Depends(get_db)) -> GoogleCalendarService:
    return GoogleCalendarService(db)


def calendar_entries(assignments: Iterable) -> list[tuple[str, str]]:
    """(member_id, google_event_id) pairs of assignments that were synced"""
    return [(a.member_id, a.google_event_id) for a in assignments if a.google_event_id]


async def _push_one(calendar, event: Event, assignment) -> bool:
    member_id = assignment.member_id
    try:
        if assignment.google_event_id:
            result = await calendar.edit_calendar_event(member_id, event, assignment.google_event_id)
        elif await calendar.has_google_auth(member_id):
            result = await calendar.sync_event_to_calendar(member_id, event, assignment)
        else:
            return False

        if result.get("success"):
            if result.get("eventId"):
                assignment.google_event_id = result["eventId"]
            return True
        logger.warning(
            f"⚠️ Calendar sync failed for member {member_id}, event {event.id}: {result.get('message')}"
        )
    except Exception as e:
        logger.error(f"❌ Calendar sync error for member {member_id}, event {event.id}: {e}")
    return False


def _store_ids(db: Session, event_id: str) -> None:
    try:
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to store calendar event ids for event {event_id}: {e}")


async def push_assignment(db: Session, calendar, assignment) -> bool:
    """Sync a single event assignment to its member's calendar"""
    synced = await _push_one(calendar, assignment.event, assignment)
    _store_ids(db, assignment.event_id)
    return synced


async def push_event(db: Session, calendar, event: Event) -> int:
    """Create or refresh the calendar copy of `event` for each assigned member"""
    synced = 0
    for assignment in list(event.assignments):
        if await _push_one(calendar, event, assignment):
            synced += 1
    _store_ids(db, event.id)

    if synced:
        logger.info(f"📅 Synced event {event.id} to {synced} calendar(s)")
    return synced


async def push_events(db: Session, calendar, events: Iterable[Event]) -> int:
    total = 0
    for event in events:
        total += await push_event(db, calendar, event)
    return total


async def remove_calendar_entries(calendar, entries: Iterable[tuple[str, str]]) -> int:
    """Delete calendar copies captured with `calendar_entries` before the rows went away"""
    removed = 0
    for member_id, google_event_id in entries:
        try:
            result = await calendar.delete_calendar_event(member_id, google_event_id)
            if result.get("success"):
                removed += 1
            else:
                logger.warning(
                    f"⚠️ Failed to delete calendar event {google_event_id} for member {member_id}: "
                    f"{result.get('message')}"
                )
        except Exception as e:
            logger.error(f"❌ Calendar delete error for member {member_id}: {e}")
    return removed
