"""
Google Calendar Integration Routes
Handles the OAuth connection and pushing a member's events to their calendar
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import CurrentAccount, get_current_account
from ..config import FRONTEND_URL, GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET
from ..database import get_db
from ..errors import ForbiddenError, NotFoundError, ValidationFailed
from ..models import Member
from ..services.calendar_sync import get_calendar_service
from ..services.google_calendar_service import GoogleCalendarService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/google-calendar", tags=["google-calendar"])


class CalendarMemberRequest(BaseModel):
    memberId: Optional[str] = None


def _resolve_member(db: Session, account: CurrentAccount, member_id: Optional[str]) -> str:
    """Members act on themselves. Company accounts and admins may name any member of their company."""
    member_id = member_id or account.member_id
    if not member_id:
        raise ValidationFailed("Member ID is required")
    if member_id != account.member_id and not (account.is_company or account.is_admin):
        raise ForbiddenError("You can only manage your own calendar connection")

    member = db.query(Member).filter(Member.id == member_id).first()
    if not member or member.company_id != account.company_id:
        raise NotFoundError("Member not found")
    return member.id


@router.post("/auth")
async def initiate_google_calendar_oauth(
    data: CalendarMemberRequest,
    account: CurrentAccount = Depends(get_current_account),
    db: Session = Depends(get_db),
    calendar: GoogleCalendarService = Depends(get_calendar_service),
):
    """Consent URL for the member; `state` carries the member id back to the callback"""
    if not GOOGLE_CLIENT_ID or not GOOGLE_CLIENT_SECRET:
        raise ValidationFailed("Google Calendar not configured")

    member_id = _resolve_member(db, account, data.memberId)
    logger.info(f"📅 Google Calendar OAuth initiated for member: {member_id}")
    return {"success": True, "authUrl": calendar.generate_auth_url(member_id)}


@router.get("/callback")
async def handle_google_calendar_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    calendar: GoogleCalendarService = Depends(get_calendar_service),
):
    """Google redirects here after consent. The browser is sent back to the frontend."""
    if error or not code or not state:
        logger.warning(f"⚠️ Google Calendar callback without code: {error}")
        params = {"calendar": "error", "message": error or "No authorization code provided"}
        return RedirectResponse(f"{FRONTEND_URL}/settings?{urlencode(params)}")

    result = await calendar.handle_callback(code, state)
    if result.get("success"):
        params = {"calendar": "connected", "success": "true"}
    else:
        params = {"calendar": "error", "success": "false", "message": result.get("message", "")}
    return RedirectResponse(f"{FRONTEND_URL}/settings?{urlencode(params)}")


@router.post("/check-auth")
async def check_google_calendar_auth(
    data: CalendarMemberRequest,
    account: CurrentAccount = Depends(get_current_account),
    db: Session = Depends(get_db),
    calendar: GoogleCalendarService = Depends(get_calendar_service),
):
    member_id = _resolve_member(db, account, data.memberId)
    connected = await calendar.has_google_auth(member_id)
    return {"success": True, "isConnected": connected, "memberId": member_id}


@router.post("/sync-projects")
async def sync_member_projects(
    data: CalendarMemberRequest,
    account: CurrentAccount = Depends(get_current_account),
    db: Session = Depends(get_db),
    calendar: GoogleCalendarService = Depends(get_calendar_service),
):
    """Push every event the member is assigned to in this company"""
    member_id = _resolve_member(db, account, data.memberId)
    return await calendar.sync_member_events(member_id, account.company_id)


@router.post("/disconnect")
async def disconnect_google_calendar(
    data: CalendarMemberRequest,
    account: CurrentAccount = Depends(get_current_account),
    db: Session = Depends(get_db),
    calendar: GoogleCalendarService = Depends(get_calendar_service),
):
    member_id = _resolve_member(db, account, data.memberId)
    result = await calendar.disconnect(member_id)
    logger.info(f"✅ Google Calendar disconnected for member: {member_id}")
    return result
