"""
Google Calendar Service
Handles OAuth tokens and calendar event creation, updates, and deletion for members
"""
import logging
from datetime import datetime, time, timedelta
from typing import Any, Optional
from urllib.parse import urlencode

import httpx
from sqlalchemy.orm import Session

from ..config import (
    CALENDAR_TIMEZONE,
    GOOGLE_CALENDAR_SOURCE,
    GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET,
    GOOGLE_REDIRECT_URI,
)
from ..models import Event, EventAssignment, Member, Project
from ..models_google_calendar import GoogleToken
from ..security_utils import decrypt_value, encrypt_value

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"  # noqa: S105 - OAuth endpoint URL
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"
GOOGLE_CALENDAR_SCOPES = ["https://www.googleapis.com/auth/calendar"]

AUTH_EXPIRED_MESSAGE = "Google authentication expired. Please reconnect Google Calendar."


class GoogleAuthExpired(Exception):
    """The stored refresh token was rejected by Google"""


class CalendarApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


def _hour_to_datetime(day, hour: int) -> datetime:
    # hour 24 rolls over to midnight of the next day
    return datetime.combine(day, time()) + timedelta(hours=hour)


def build_event_payload(event: Event) -> dict[str, Any]:
    """Google Calendar resource for a single-day event, all-day when hours are missing"""
    project = event.project
    project_name = project.name if project else "Unknown Project"
    client_name = (project.client or {}).get("name") if project else None
    company_name = project.company.name if project and project.company else "Unknown Company"

    description = "\n".join(
        [
            event.name,
            f"Project: {project_name}",
            f"Client: {client_name or 'N/A'}",
            f"Location: {event.location or 'Not specified'}",
            f"Company: {company_name}",
        ]
    )

    payload: dict[str, Any] = {
        "summary": event.name,
        "description": description,
        "location": event.location or "",
        "extendedProperties": {
            "private": {
                "eventId": event.id,
                "projectId": project.id if project else None,
                "source": GOOGLE_CALENDAR_SOURCE,
            }
        },
    }

    if event.start_hour is not None and event.end_hour is not None:
        payload["start"] = {
            "dateTime": _hour_to_datetime(event.date, event.start_hour).isoformat(),
            "timeZone": CALENDAR_TIMEZONE,
        }
        payload["end"] = {
            "dateTime": _hour_to_datetime(event.date, event.end_hour).isoformat(),
            "timeZone": CALENDAR_TIMEZONE,
        }
    else:
        payload["start"] = {"date": event.date.isoformat()}
        payload["end"] = {"date": (event.date + timedelta(days=1)).isoformat()}

    return payload


class GoogleCalendarService:
    """
    Calendar sync collaborator.

    Every public call is fallible by contract and reports failures in its
    return value instead of raising, so callers can treat sync as best-effort.
    """

    def __init__(self, db: Session, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.db = db
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport, timeout=15.0)

    # ------------------------------------------------------------------
    # OAuth
    # ------------------------------------------------------------------

    def generate_auth_url(self, member_id: str) -> str:
        params = {
            "client_id": GOOGLE_CLIENT_ID,
            "redirect_uri": GOOGLE_REDIRECT_URI,
            "response_type": "code",
            "scope": " ".join(GOOGLE_CALENDAR_SCOPES),
            "access_type": "offline",
            "prompt": "consent",
            "state": member_id,
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def handle_callback(self, code: str, state: str) -> dict:
        """Exchange an authorization code and store the member's tokens"""
        try:
            member = self.db.query(Member).filter(Member.id == state).first()
            if not member:
                return {"success": False, "message": "Member not found"}

            async with self._client() as client:
                response = await client.post(
                    GOOGLE_TOKEN_URL,
                    data={
                        "code": code,
                        "client_id": GOOGLE_CLIENT_ID,
                        "client_secret": GOOGLE_CLIENT_SECRET,
                        "redirect_uri": GOOGLE_REDIRECT_URI,
                        "grant_type": "authorization_code",
                    },
                )

            if response.status_code != 200:
                logger.error(f"❌ Token exchange failed: {response.text}")
                return {"success": False, "message": "Failed to connect Google Calendar"}

            tokens = response.json()
            if not tokens.get("access_token") or not tokens.get("refresh_token"):
                logger.error("❌ No refresh token received from Google")
                return {"success": False, "message": "Failed to connect Google Calendar"}

            self.deactivate_tokens(member.id, commit=False)
            self.db.add(
                GoogleToken(
                    member_id=member.id,
                    access_token=encrypt_value(tokens["access_token"]),
                    refresh_token=encrypt_value(tokens["refresh_token"]),
                    expiry_date=datetime.utcnow() + timedelta(seconds=tokens.get("expires_in", 3600)),
                    scope=tokens.get("scope"),
                    token_type=tokens.get("token_type", "Bearer"),
                    is_active=True,
                )
            )
            self.db.commit()

            logger.info(f"✅ Google Calendar connected for member: {member.id}")
            return {"success": True, "message": "Google Calendar connected successfully"}
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error in Google OAuth callback: {str(e)}")
            return {"success": False, "message": "Failed to connect Google Calendar"}

    def get_active_token(self, member_id: str) -> Optional[GoogleToken]:
        return (
            self.db.query(GoogleToken)
            .filter(GoogleToken.member_id == member_id, GoogleToken.is_active.is_(True))
            .order_by(GoogleToken.created_at.desc())
            .first()
        )

    async def has_google_auth(self, member_id: str) -> bool:
        return self.get_active_token(member_id) is not None

    def deactivate_tokens(self, member_id: str, commit: bool = True) -> None:
        self.db.query(GoogleToken).filter(
            GoogleToken.member_id == member_id, GoogleToken.is_active.is_(True)
        ).update({GoogleToken.is_active: False}, synchronize_session=False)
        if commit:
            self.db.commit()

    async def _get_access_token(self, member_id: str) -> str:
        """Return a valid access token, refreshing it 5 minutes before expiry"""
        token = self.get_active_token(member_id)
        if not token:
            raise CalendarApiError(401, "No active Google token found. Please connect Google Calendar first.")

        if not token.is_expired:
            return decrypt_value(token.access_token)

        logger.info(f"🔄 Google Calendar token expired for member {member_id}, refreshing...")
        async with self._client() as client:
            response = await client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "client_id": GOOGLE_CLIENT_ID,
                    "client_secret": GOOGLE_CLIENT_SECRET,
                    "refresh_token": decrypt_value(token.refresh_token),
                    "grant_type": "refresh_token",
                },
            )

        if response.status_code in (400, 401) and (
            response.status_code == 401 or "invalid_grant" in response.text
        ):
            raise GoogleAuthExpired(response.text)
        if response.status_code != 200:
            raise CalendarApiError(response.status_code, f"Token refresh failed: {response.text}")

        tokens = response.json()
        access_token = tokens.get("access_token")
        if not access_token:
            raise CalendarApiError(502, "No access token in refresh response")

        token.access_token = encrypt_value(access_token)
        token.expiry_date = datetime.utcnow() + timedelta(seconds=tokens.get("expires_in", 3600))
        if tokens.get("refresh_token"):
            token.refresh_token = encrypt_value(tokens["refresh_token"])
        self.db.commit()

        logger.info("✅ Google Calendar token refreshed successfully")
        return access_token

    def _auth_expired(self, member_id: str) -> dict:
        logger.warning(f"⚠️ Google authentication expired for member {member_id}, deactivating token")
        try:
            self.deactivate_tokens(member_id)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to deactivate Google token for member {member_id}: {e}")
        return {"success": False, "message": AUTH_EXPIRED_MESSAGE}

    @staticmethod
    def _check(response: httpx.Response, action: str) -> None:
        if response.status_code >= 400:
            raise CalendarApiError(response.status_code, f"Failed to {action}: {response.text}")

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def _find_existing_event(self, client: httpx.AsyncClient, headers: dict, event_id: str) -> Optional[str]:
        """Look up a previously synced copy through its private extended property"""
        try:
            response = await client.get(
                f"{GOOGLE_CALENDAR_API}/calendars/primary/events",
                headers=headers,
                params={
                    "privateExtendedProperty": f"eventId={event_id}",
                    "maxResults": 1,
                    "showDeleted": "false",
                    "singleEvents": "true",
                },
            )
            if response.status_code != 200:
                return None
            for item in response.json().get("items", []):
                if item.get("extendedProperties", {}).get("private", {}).get("eventId") == event_id:
                    return item.get("id")
            return None
        except Exception as e:
            logger.error(f"❌ Error finding existing event: {e}")
            return None

    async def sync_event_to_calendar(
        self,
        member_id: str,
        event: Event,
        assignment: Optional[EventAssignment] = None,
    ) -> dict:
        """Update the member's copy of `event` when one is known, insert it otherwise"""
        try:
            access_token = await self._get_access_token(member_id)
            headers = {"Authorization": f"Bearer {access_token}"}
            payload = build_event_payload(event)

            async with self._client() as client:
                existing_id = assignment.google_event_id if assignment else None
                if not existing_id:
                    existing_id = await self._find_existing_event(client, headers, event.id)

                response = None
                if existing_id:
                    response = await client.put(
                        f"{GOOGLE_CALENDAR_API}/calendars/primary/events/{existing_id}",
                        headers=headers,
                        json=payload,
                    )
                    if response.status_code in (404, 410):
                        existing_id = None
                if not existing_id:
                    response = await client.post(
                        f"{GOOGLE_CALENDAR_API}/calendars/primary/events",
                        headers=headers,
                        json=payload,
                    )

            self._check(response, "sync calendar event")
            google_event_id = response.json().get("id")
            if assignment is not None and google_event_id:
                assignment.google_event_id = google_event_id

            logger.info(f"✅ Synced event '{event.name}' for member {member_id}: {google_event_id}")
            return {
                "success": True,
                "eventId": google_event_id,
                "message": "Event updated" if existing_id else "Event created",
            }
        except GoogleAuthExpired:
            return self._auth_expired(member_id)
        except CalendarApiError as e:
            if e.status_code == 401:
                return self._auth_expired(member_id)
            logger.error(f"❌ Error syncing event '{event.name}': {e}")
            return {"success": False, "message": str(e)}
        except Exception as e:
            logger.error(f"❌ Error syncing event '{event.name}': {e}")
            return {"success": False, "message": "Failed to sync to calendar"}

    async def edit_calendar_event(self, member_id: str, event: Event, google_event_id: str) -> dict:
        """Update a synced event; a copy deleted on Google's side is recreated"""
        try:
            access_token = await self._get_access_token(member_id)
            async with self._client() as client:
                response = await client.put(
                    f"{GOOGLE_CALENDAR_API}/calendars/primary/events/{google_event_id}",
                    headers={"Authorization": f"Bearer {access_token}"},
                    json=build_event_payload(event),
                )

            if response.status_code in (404, 410):
                logger.info(f"ℹ️ Calendar event {google_event_id} not found, creating a new one")
                return await self.sync_event_to_calendar(member_id, event)

            self._check(response, "update calendar event")
            logger.info(f"✅ Updated calendar event {google_event_id} for member {member_id}")
            return {"success": True, "eventId": response.json().get("id", google_event_id), "message": "Event updated"}
        except GoogleAuthExpired:
            return self._auth_expired(member_id)
        except CalendarApiError as e:
            if e.status_code == 401:
                return self._auth_expired(member_id)
            logger.error(f"❌ Error updating calendar event {google_event_id}: {e}")
            return {"success": False, "message": str(e)}
        except Exception as e:
            logger.error(f"❌ Error updating calendar event {google_event_id}: {e}")
            return {"success": False, "message": "Failed to update calendar event"}

    async def delete_calendar_event(self, member_id: str, google_event_id: str) -> dict:
        """Delete a synced event; an already missing event counts as deleted"""
        try:
            access_token = await self._get_access_token(member_id)
            async with self._client() as client:
                response = await client.delete(
                    f"{GOOGLE_CALENDAR_API}/calendars/primary/events/{google_event_id}",
                    headers={"Authorization": f"Bearer {access_token}"},
                )

            if response.status_code in (404, 410):
                logger.info(f"ℹ️ Calendar event {google_event_id} already deleted")
                return {"success": True, "message": "Event already deleted"}

            self._check(response, "delete calendar event")
            logger.info(f"✅ Deleted calendar event {google_event_id} for member {member_id}")
            return {"success": True, "message": "Event deleted"}
        except GoogleAuthExpired:
            return self._auth_expired(member_id)
        except CalendarApiError as e:
            if e.status_code == 401:
                return self._auth_expired(member_id)
            logger.error(f"❌ Error deleting calendar event {google_event_id}: {e}")
            return {"success": False, "message": str(e)}
        except Exception as e:
            logger.error(f"❌ Error deleting calendar event {google_event_id}: {e}")
            return {"success": False, "message": "Failed to delete calendar event"}

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    def _member_assignments(self, member_id: str, company_id: Optional[str] = None) -> list[EventAssignment]:
        query = (
            self.db.query(EventAssignment)
            .join(EventAssignment.event)
            .join(Event.project)
            .filter(EventAssignment.member_id == member_id)
        )
        if company_id:
            query = query.filter(Project.company_id == company_id)
        return query.all()

    async def sync_member_events(self, member_id: str, company_id: Optional[str] = None) -> dict:
        """Push every event the member is assigned to"""
        if not await self.has_google_auth(member_id):
            return {"success": False, "message": "Google Calendar not connected", "synced": 0, "failed": 0}

        synced, failed = 0, 0
        for assignment in self._member_assignments(member_id, company_id):
            if assignment.google_event_id:
                result = await self.edit_calendar_event(member_id, assignment.event, assignment.google_event_id)
            else:
                result = await self.sync_event_to_calendar(member_id, assignment.event, assignment)
            if result.get("success"):
                assignment.google_event_id = result.get("eventId") or assignment.google_event_id
                synced += 1
            else:
                failed += 1
                if result.get("message") == AUTH_EXPIRED_MESSAGE:
                    break
        self.db.commit()

        logger.info(f"📅 Synced {synced} event(s) for member {member_id}, {failed} failed")
        return {
            "success": failed == 0,
            "message": f"Synced {synced} event(s) to Google Calendar",
            "synced": synced,
            "failed": failed,
        }

    async def disconnect(self, member_id: str) -> dict:
        """Remove synced copies best-effort, then deactivate the member's tokens"""
        removed = 0
        if await self.has_google_auth(member_id):
            for assignment in self._member_assignments(member_id):
                if not assignment.google_event_id:
                    continue
                result = await self.delete_calendar_event(member_id, assignment.google_event_id)
                if result.get("success"):
                    removed += 1
                assignment.google_event_id = None
        self.deactivate_tokens(member_id, commit=False)
        self.db.commit()

        logger.info(f"✅ Google Calendar disconnected for member {member_id} ({removed} event(s) removed)")
        return {"success": True, "message": "Google Calendar disconnected successfully"}
