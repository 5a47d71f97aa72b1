"""Tests for the Google Calendar collaborator against a mocked Google API."""

import asyncio
import json
from datetime import datetime, timedelta

import httpx
from conftest import d, make_company, make_event, make_member, make_project

from studio.models_google_calendar import GoogleToken
from studio.security_utils import decrypt_value, encrypt_value
from studio.services.google_calendar_service import (
    AUTH_EXPIRED_MESSAGE,
    GOOGLE_CALENDAR_API,
    GOOGLE_TOKEN_URL,
    GoogleCalendarService,
    build_event_payload,
)

EVENTS_URL = f"{GOOGLE_CALENDAR_API}/calendars/primary/events"


class FakeGoogle:
    """Routes requests to canned responses and records what was called"""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url).split("?")[0]
        self.calls.append((request.method, url, request))
        status, body = self.routes[(request.method, url)]
        return httpx.Response(status, json=body)

    def methods(self):
        return [(method, url) for method, url, _ in self.calls]


def _service(db, routes):
    google = FakeGoogle(routes)
    return GoogleCalendarService(db, transport=httpx.MockTransport(google)), google


def _seed(db, expires_in=timedelta(hours=1)):
    company = make_company(db)
    mia = make_member(db, company, "Mia")
    project = make_project(db, company, "Wedding", d("2024-06-01"), d("2024-06-01"), 9, 24, members=[mia])
    event = make_event(db, project, "Reception", d("2024-06-01"), 20, 24, members=[mia])
    db.add(
        GoogleToken(
            member_id=mia.id,
            access_token=encrypt_value("at-1"),
            refresh_token=encrypt_value("rt-1"),
            expiry_date=datetime.utcnow() + expires_in,
        )
    )
    db.commit()
    return mia, event


def test_payload_rolls_hour_24_into_next_day(db):
    _, event = _seed(db)

    payload = build_event_payload(event)

    assert payload["start"]["dateTime"] == "2024-06-01T20:00:00"
    assert payload["end"]["dateTime"] == "2024-06-02T00:00:00"
    assert payload["extendedProperties"]["private"]["eventId"] == event.id
    assert "Company: Lumen Studio" in payload["description"]


def test_callback_stores_encrypted_tokens(db):
    company = make_company(db)
    mia = make_member(db, company, "Mia")
    service, _ = _service(
        db,
        {("POST", GOOGLE_TOKEN_URL): (200, {"access_token": "at-9", "refresh_token": "rt-9", "expires_in": 3600})},
    )

    result = asyncio.run(service.handle_callback("auth-code", mia.id))

    assert result == {"success": True, "message": "Google Calendar connected successfully"}
    token = service.get_active_token(mia.id)
    assert token.access_token != "at-9"
    assert decrypt_value(token.access_token) == "at-9"
    assert decrypt_value(token.refresh_token) == "rt-9"


def test_callback_failure_stores_nothing(db):
    company = make_company(db)
    mia = make_member(db, company, "Mia")
    service, _ = _service(db, {("POST", GOOGLE_TOKEN_URL): (400, {"error": "invalid_request"})})

    result = asyncio.run(service.handle_callback("bad-code", mia.id))

    assert result["success"] is False
    assert db.query(GoogleToken).count() == 0


def test_sync_creates_event_with_fresh_token(db):
    mia, event = _seed(db)
    service, google = _service(
        db,
        {
            ("GET", EVENTS_URL): (200, {"items": []}),
            ("POST", EVENTS_URL): (200, {"id": "g-1"}),
        },
    )
    assignment = event.assignments[0]

    result = asyncio.run(service.sync_event_to_calendar(mia.id, event, assignment))

    assert result == {"success": True, "eventId": "g-1", "message": "Event created"}
    assert assignment.google_event_id == "g-1"
    _, _, request = google.calls[-1]
    assert request.headers["Authorization"] == "Bearer at-1"
    assert json.loads(request.content)["summary"] == "Reception"


def test_expired_token_is_refreshed_first(db):
    mia, event = _seed(db, expires_in=timedelta(minutes=2))
    service, google = _service(
        db,
        {
            ("POST", GOOGLE_TOKEN_URL): (200, {"access_token": "at-2", "expires_in": 3600}),
            ("GET", EVENTS_URL): (200, {"items": []}),
            ("POST", EVENTS_URL): (200, {"id": "g-2"}),
        },
    )

    result = asyncio.run(service.sync_event_to_calendar(mia.id, event))

    assert result["success"] is True
    assert google.methods()[0] == ("POST", GOOGLE_TOKEN_URL)
    assert google.calls[-1][2].headers["Authorization"] == "Bearer at-2"
    assert decrypt_value(service.get_active_token(mia.id).access_token) == "at-2"


def test_edit_of_deleted_copy_recreates_it(db):
    mia, event = _seed(db)
    service, google = _service(
        db,
        {
            ("PUT", f"{EVENTS_URL}/g-gone"): (404, {"error": "notFound"}),
            ("GET", EVENTS_URL): (200, {"items": []}),
            ("POST", EVENTS_URL): (200, {"id": "g-new"}),
        },
    )

    result = asyncio.run(service.edit_calendar_event(mia.id, event, "g-gone"))

    assert result == {"success": True, "eventId": "g-new", "message": "Event created"}
    assert google.methods()[-1] == ("POST", EVENTS_URL)


def test_delete_of_missing_event_counts_as_success(db):
    mia, _ = _seed(db)
    service, _ = _service(db, {("DELETE", f"{EVENTS_URL}/g-gone"): (410, {})})

    result = asyncio.run(service.delete_calendar_event(mia.id, "g-gone"))

    assert result == {"success": True, "message": "Event already deleted"}


def test_revoked_refresh_token_deactivates_connection(db):
    mia, event = _seed(db, expires_in=timedelta(minutes=-5))
    service, _ = _service(db, {("POST", GOOGLE_TOKEN_URL): (400, {"error": "invalid_grant"})})

    result = asyncio.run(service.sync_event_to_calendar(mia.id, event))

    assert result == {"success": False, "message": AUTH_EXPIRED_MESSAGE}
    assert asyncio.run(service.has_google_auth(mia.id)) is False


def test_unconnected_member_is_reported(db):
    company = make_company(db)
    mia = make_member(db, company, "Mia")
    service, google = _service(db, {})

    result = asyncio.run(service.sync_member_events(mia.id))

    assert result["success"] is False
    assert result["message"] == "Google Calendar not connected"
    assert google.calls == []


def test_disconnect_removes_copies_and_tokens(db):
    mia, event = _seed(db)
    event.assignments[0].google_event_id = "g-1"
    db.commit()
    service, google = _service(db, {("DELETE", f"{EVENTS_URL}/g-1"): (204, None)})

    result = asyncio.run(service.disconnect(mia.id))

    assert result["success"] is True
    assert google.methods() == [("DELETE", f"{EVENTS_URL}/g-1")]
    db.refresh(event.assignments[0])
    assert event.assignments[0].google_event_id is None
    assert service.get_active_token(mia.id) is None
