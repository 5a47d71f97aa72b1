"""Custom reminder router - FastAPI endpoints for event reminders"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import CurrentAccount, get_current_account
from ...database import get_db
from .schemas import CustomReminderCreate, CustomReminderUpdate, ToggleSent
from .service import CustomReminderService

router = APIRouter(prefix="/custom-reminder", tags=["Custom Reminders"])


def get_reminder_service(db: Session = Depends(get_db)) -> CustomReminderService:
    """Dependency injection for CustomReminderService"""
    return CustomReminderService(db)


@router.post("", status_code=201)
async def create_custom_reminder(
    data: CustomReminderCreate,
    account: CurrentAccount = Depends(get_current_account),
    service: CustomReminderService = Depends(get_reminder_service),
):
    return service.create_reminder(data, account)


@router.get("")
async def get_all_custom_reminders(
    account: CurrentAccount = Depends(get_current_account),
    service: CustomReminderService = Depends(get_reminder_service),
):
    return service.list_company_reminders(account)


@router.get("/pending")
async def get_pending_custom_reminders(
    account: CurrentAccount = Depends(get_current_account),
    service: CustomReminderService = Depends(get_reminder_service),
):
    return service.list_pending(account)


@router.get("/event/{event_id}")
async def get_event_custom_reminders(
    event_id: str,
    account: CurrentAccount = Depends(get_current_account),
    service: CustomReminderService = Depends(get_reminder_service),
):
    return service.list_event_reminders(event_id, account)


@router.patch("/{reminder_id}")
async def update_custom_reminder(
    reminder_id: str,
    data: CustomReminderUpdate,
    account: CurrentAccount = Depends(get_current_account),
    service: CustomReminderService = Depends(get_reminder_service),
):
    return service.update_reminder(reminder_id, data, account)


@router.delete("/{reminder_id}")
async def delete_custom_reminder(
    reminder_id: str,
    account: CurrentAccount = Depends(get_current_account),
    service: CustomReminderService = Depends(get_reminder_service),
):
    return service.delete_reminder(reminder_id, account)


@router.patch("/{reminder_id}/toggle-sent")
async def toggle_custom_reminder_sent(
    reminder_id: str,
    data: ToggleSent,
    account: CurrentAccount = Depends(get_current_account),
    service: CustomReminderService = Depends(get_reminder_service),
):
    return service.toggle_sent(reminder_id, data.isSent, account)
