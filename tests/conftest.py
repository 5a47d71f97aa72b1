import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("RESEND_API_KEY", None)
os.environ.pop("SMTP_HOST", None)

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from studio import email_service  # noqa: E402
from studio.auth import create_company_token, create_member_token  # noqa: E402
from studio.database import Base, get_db  # noqa: E402
from studio.main import app  # noqa: E402
from studio.models import (  # noqa: E402
    Company,
    Event,
    EventAssignment,
    Member,
    Project,
    ProjectAssignment,
    Role,
    default_reminders,
)
from studio.services import storage  # noqa: E402
from studio.services.calendar_sync import get_calendar_service  # noqa: E402
from studio.services.gemini import get_gemini_client  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeCalendar:
    """Records calendar calls. Members in `connected` have a Google token. Setting `error` makes every push raise it."""

    def __init__(self):
        self.connected = set()
        self.synced = []
        self.edited = []
        self.deleted = []
        self.error = None

    def generate_auth_url(self, member_id):
        return f"https://accounts.test/consent?state={member_id}"

    async def has_google_auth(self, member_id):
        return member_id in self.connected

    async def sync_event_to_calendar(self, member_id, event, assignment=None):
        if self.error:
            raise self.error
        self.synced.append((member_id, event.id))
        return {"success": True, "eventId": f"g-{event.id[:8]}-{member_id[:8]}", "message": "Event created"}

    async def edit_calendar_event(self, member_id, event, google_event_id):
        if self.error:
            raise self.error
        self.edited.append((member_id, google_event_id))
        return {"success": True, "eventId": google_event_id, "message": "Event updated"}

    async def delete_calendar_event(self, member_id, google_event_id):
        if self.error:
            raise self.error
        self.deleted.append((member_id, google_event_id))
        return {"success": True, "message": "Event deleted"}


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def calendar():
    return FakeCalendar()


@pytest.fixture
def sent_emails(monkeypatch):
    sent = []

    async def fake_send_email(to, subject, mjml_content, from_address=None):
        sent.append({"to": to, "subject": subject})
        return {"id": "test"}

    monkeypatch.setattr(email_service, "send_email", fake_send_email)
    return sent


@pytest.fixture
def uploads(monkeypatch):
    stored = {}

    def fake_upload(data, key, content_type):
        stored[key] = data
        return key

    def fake_delete(key):
        stored.pop(key, None)
        return True

    monkeypatch.setattr(storage, "upload_bytes", fake_upload)
    monkeypatch.setattr(storage, "delete_object", fake_delete)
    monkeypatch.setattr(storage, "generate_presigned_url", lambda key, expiration=3600: f"https://files.test/{key}")
    return stored


@pytest.fixture
def client(db, calendar, sent_emails, uploads):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_calendar_service] = lambda: calendar
    app.dependency_overrides[get_gemini_client] = lambda: None
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ----------------------------------------------------------------------
# Data builders
# ----------------------------------------------------------------------


def make_company(db, name="Lumen Studio", email="owner@lumen.test", country="Canada"):
    company = Company(name=name, email=email, password_hash="x", country=country)
    db.add(company)
    db.commit()
    return company


def make_role(db, company, name="Photographer"):
    role = Role(company_id=company.id, name=name)
    db.add(role)
    db.commit()
    return role


def make_member(db, company, name, role=None, email=None, active=True, is_admin=False):
    member = Member(
        company_id=company.id,
        role_id=role.id if role else None,
        name=name,
        email=email or f"{name.lower().replace(' ', '.')}@lumen.test",
        password_hash="x",
        active=active,
        is_admin=is_admin,
        skills=[],
    )
    db.add(member)
    db.commit()
    return member


def make_project(db, company, name, start, end, start_hour, end_hour, members=()):
    project = Project(
        company_id=company.id,
        name=name,
        color="#336699",
        start_date=start,
        end_date=end,
        start_hour=start_hour,
        end_hour=end_hour,
        checklist=[],
        equipments=[],
        documents=[],
    )
    for member in members:
        project.assignments.append(ProjectAssignment(member_id=member.id))
    db.add(project)
    db.commit()
    return project


def make_event(db, project, name, day, start_hour, end_hour, members=(), reminders=None):
    event = Event(
        project_id=project.id,
        name=name,
        date=day,
        start_hour=start_hour,
        end_hour=end_hour,
        reminders=reminders or default_reminders(),
    )
    for member in members:
        event.assignments.append(EventAssignment(member_id=member.id))
    db.add(event)
    db.commit()
    return event


def company_headers(company):
    return {"Authorization": f"Bearer {create_company_token(company.id)}"}


def member_headers(member):
    return {"Authorization": f"Bearer {create_member_token(member.id, member.company_id, member.is_admin)}"}


def d(value):
    return date.fromisoformat(value)
