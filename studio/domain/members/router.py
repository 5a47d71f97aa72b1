"""Member router - FastAPI endpoints for company members"""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from ...auth import CurrentAccount, get_current_account
from ...database import get_db
from ...services.calendar_sync import get_calendar_service
from ..scheduling.schemas import AvailabilityRequest
from .schemas import MemberCreate, MemberLogin, MembersByCompanyRequest, MemberUpdate, RingColorUpdate
from .service import MemberService

router = APIRouter(prefix="/member", tags=["Members"])


def get_member_service(
    db: Session = Depends(get_db),
    calendar=Depends(get_calendar_service),
) -> MemberService:
    """Dependency injection for MemberService"""
    return MemberService(db, calendar_service=calendar)


@router.post("/add", status_code=201)
async def create_member(
    data: MemberCreate,
    account: CurrentAccount = Depends(get_current_account),
    service: MemberService = Depends(get_member_service),
):
    return await service.create_member(data, account)


@router.post("/by-company")
async def get_members_by_company(
    data: MembersByCompanyRequest,
    account: CurrentAccount = Depends(get_current_account),
    service: MemberService = Depends(get_member_service),
):
    """Members with the projects and events that fall in a month or week"""
    return service.get_members_by_company(data, account)


@router.post("/available")
async def get_available_members(
    data: AvailabilityRequest,
    account: CurrentAccount = Depends(get_current_account),
    service: MemberService = Depends(get_member_service),
):
    """Classify each member as fully, partially or not available for a window"""
    return service.get_available_members(data, account)


@router.put("/update/{member_id}")
async def update_member(
    member_id: str,
    data: MemberUpdate,
    account: CurrentAccount = Depends(get_current_account),
    service: MemberService = Depends(get_member_service),
):
    return service.update_member(member_id, data, account)


@router.patch("/{member_id}/ring-color")
async def update_ring_color(
    member_id: str,
    data: RingColorUpdate,
    account: CurrentAccount = Depends(get_current_account),
    service: MemberService = Depends(get_member_service),
):
    return service.update_ring_color(member_id, data.ringColor, account)


@router.patch("/{member_id}/toggle-status")
async def toggle_member_status(
    member_id: str,
    account: CurrentAccount = Depends(get_current_account),
    service: MemberService = Depends(get_member_service),
):
    return service.toggle_status(member_id, account)


@router.patch("/{member_id}/toggle-admin")
async def toggle_member_admin(
    member_id: str,
    account: CurrentAccount = Depends(get_current_account),
    service: MemberService = Depends(get_member_service),
):
    return service.toggle_admin(member_id, account)


@router.post("/upload-photo")
async def upload_profile_photo(
    memberId: str = Form(...),
    photo: UploadFile = File(...),
    account: CurrentAccount = Depends(get_current_account),
    service: MemberService = Depends(get_member_service),
):
    content = await photo.read()
    return service.upload_photo(memberId, content, photo.content_type, photo.filename, account)


@router.delete("/remove-photo/{member_id}")
async def remove_profile_photo(
    member_id: str,
    account: CurrentAccount = Depends(get_current_account),
    service: MemberService = Depends(get_member_service),
):
    return service.remove_photo(member_id, account)


@router.post("/login")
async def member_login(data: MemberLogin, service: MemberService = Depends(get_member_service)):
    return service.login(data)


@router.delete("/delete/{member_id}")
async def delete_member(
    member_id: str,
    account: CurrentAccount = Depends(get_current_account),
    service: MemberService = Depends(get_member_service),
):
    return await service.delete_member(member_id, account)
