"""Event router - FastAPI endpoints for project events"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import CurrentAccount, get_current_account
from ...database import get_db
from ...services.calendar_sync import get_calendar_service
from .schemas import EventCreate, EventDelete, EventUpdate
from .service import EventService

router = APIRouter(prefix="/event", tags=["Events"])


def get_event_service(
    db: Session = Depends(get_db),
    calendar=Depends(get_calendar_service),
) -> EventService:
    """Dependency injection for EventService"""
    return EventService(db, calendar_service=calendar)


@router.post("/add", status_code=201)
async def create_event(
    data: EventCreate,
    account: CurrentAccount = Depends(get_current_account),
    service: EventService = Depends(get_event_service),
):
    return await service.create_event(data, account)


@router.put("/update/{event_id}")
async def update_event(
    event_id: str,
    data: EventUpdate,
    account: CurrentAccount = Depends(get_current_account),
    service: EventService = Depends(get_event_service),
):
    """Reschedules are rejected with 409 when an assigned member is busy"""
    return await service.update_event(event_id, data, account)


@router.delete("/delete")
async def delete_event(
    data: EventDelete,
    account: CurrentAccount = Depends(get_current_account),
    service: EventService = Depends(get_event_service),
):
    return await service.delete_event(data.eventId, account)


@router.get("/{event_id}")
async def get_event(
    event_id: str,
    account: CurrentAccount = Depends(get_current_account),
    service: EventService = Depends(get_event_service),
):
    return service.get_event(event_id, account)
