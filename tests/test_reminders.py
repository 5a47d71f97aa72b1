"""Tests for custom event reminders."""

from datetime import datetime

import pytest
from conftest import company_headers, d, make_company, make_event, make_member, make_project

from studio.auth import ACCOUNT_COMPANY, CurrentAccount
from studio.domain.reminders.service import CustomReminderService
from studio.errors import NotFoundError


def _seed(db):
    company = make_company(db)
    mia = make_member(db, company, "Mia")
    project = make_project(db, company, "Wedding", d("2024-06-10"), d("2024-06-10"), 9, 18, members=[mia])
    event = make_event(db, project, "Ceremony", d("2024-06-10"), 14, 16, members=[mia])
    return company, event


def _create(client, company, event, **overrides):
    body = {"eventId": event.id, "reminderDate": "2024-06-09", "reminderHour": 18, "message": "Pack the drone"}
    body.update(overrides)
    return client.post("/custom-reminder", json=body, headers=company_headers(company))


def test_create_reminder(client, db):
    company, event = _seed(db)

    response = _create(client, company, event)

    assert response.status_code == 201
    reminder = response.json()["customReminder"]
    assert reminder["eventName"] == "Ceremony"
    assert reminder["reminderDate"] == "2024-06-09"
    assert reminder["reminderHour"] == 18
    assert reminder["isSent"] is False


def test_reminder_on_event_day_before_start_is_allowed(client, db):
    company, event = _seed(db)

    assert _create(client, company, event, reminderDate="2024-06-10", reminderHour=13).status_code == 201


def test_reminder_must_precede_event(client, db):
    company, event = _seed(db)

    response = _create(client, company, event, reminderDate="2024-06-10", reminderHour=14)

    assert response.status_code == 400
    assert response.json()["message"] == "Reminder must be set before the event starts"


def test_duplicate_slot_is_rejected(client, db):
    company, event = _seed(db)
    _create(client, company, event)

    response = _create(client, company, event, message="Again")

    assert response.status_code == 400
    assert response.json()["message"] == "A reminder already exists for this date and time"


def test_reminder_hour_range(client, db):
    company, event = _seed(db)

    response = _create(client, company, event, reminderHour=24)

    assert response.status_code == 400
    assert response.json()["message"] == "Reminder hour must be between 0 and 23"


def test_moving_a_sent_reminder_resets_it(client, db):
    company, event = _seed(db)
    headers = company_headers(company)
    reminder_id = _create(client, company, event).json()["customReminder"]["id"]

    sent = client.patch(f"/custom-reminder/{reminder_id}/toggle-sent", json={"isSent": True}, headers=headers)
    moved = client.patch(f"/custom-reminder/{reminder_id}", json={"reminderHour": 20}, headers=headers)

    assert sent.json()["customReminder"]["isSent"] is True
    assert sent.json()["customReminder"]["sentAt"] is not None
    reminder = moved.json()["customReminder"]
    assert reminder["reminderHour"] == 20
    assert reminder["isSent"] is False
    assert reminder["sentAt"] is None


def test_toggle_sent_requires_boolean(client, db):
    company, event = _seed(db)
    reminder_id = _create(client, company, event).json()["customReminder"]["id"]

    response = client.patch(
        f"/custom-reminder/{reminder_id}/toggle-sent", json={"isSent": "yes"}, headers=company_headers(company)
    )

    assert response.status_code == 400
    assert response.json()["message"] == "isSent must be a boolean"


def test_list_and_delete(client, db):
    company, event = _seed(db)
    headers = company_headers(company)
    first = _create(client, company, event).json()["customReminder"]["id"]
    _create(client, company, event, reminderHour=8, reminderDate="2024-06-10")

    listed = client.get(f"/custom-reminder/event/{event.id}", headers=headers).json()["customReminders"]
    client.delete(f"/custom-reminder/{first}", headers=headers)
    remaining = client.get("/custom-reminder", headers=headers).json()["customReminders"]

    assert len(listed) == 2
    assert [r["reminderHour"] for r in remaining] == [8]


def test_other_company_cannot_see_reminder(client, db):
    company, event = _seed(db)
    other = make_company(db, name="Other", email="other@studio.test")
    reminder_id = _create(client, company, event).json()["customReminder"]["id"]

    response = client.delete(f"/custom-reminder/{reminder_id}", headers=company_headers(other))

    assert response.status_code == 404
    assert response.json()["message"] == "Custom reminder not found"


def test_pending_reminders_are_those_due_this_hour(client, db):
    company, event = _seed(db)
    _create(client, company, event)
    _create(client, company, event, reminderHour=19)
    account = CurrentAccount(account_id=company.id, company_id=company.id, account_type=ACCOUNT_COMPANY)
    service = CustomReminderService(db, clock=lambda: datetime(2024, 6, 9, 18, 25))

    result = service.list_pending(account)

    assert result["count"] == 1
    assert result["reminders"][0]["reminderHour"] == 18


def test_unknown_reminder_raises(db):
    company, _ = _seed(db)
    account = CurrentAccount(account_id=company.id, company_id=company.id, account_type=ACCOUNT_COMPANY)

    with pytest.raises(NotFoundError):
        CustomReminderService(db).delete_reminder("missing", account)
