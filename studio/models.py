import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_uuid():
    """Generate a UUID primary key"""
    return str(uuid.uuid4())


def default_reminders():
    return {"weekBefore": True, "dayBefore": True}


class Company(Base):
    __tablename__ = "companies"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    country = Column(String(100), nullable=True)
    logo = Column(String(500), nullable=True)
    price = Column(Numeric(10, 2), nullable=True)  # Starting price shown on public listings

    # Password reset
    reset_otp = Column(String(6), nullable=True)
    reset_otp_expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    roles = relationship("Role", back_populates="company", cascade="all, delete-orphan")
    members = relationship("Member", back_populates="company", cascade="all, delete-orphan")
    projects = relationship("Project", back_populates="company", cascade="all, delete-orphan")
    packages = relationship("Package", back_populates="company", cascade="all, delete-orphan")


class Role(Base):
    __tablename__ = "roles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    company = relationship("Company", back_populates="roles")
    members = relationship("Member", back_populates="role")


class Member(Base):
    __tablename__ = "members"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    role_id = Column(String(36), ForeignKey("roles.id"), nullable=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    country_code = Column(String(10), nullable=True)
    profile_photo = Column(String(500), nullable=True)  # S3 object key
    location = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    skills = Column(JSON, default=list, nullable=True)
    ring_color = Column(String(20), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)

    # Password reset
    reset_otp = Column(String(6), nullable=True)
    reset_otp_expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    company = relationship("Company", back_populates="members")
    role = relationship("Role", back_populates="members")
    project_assignments = relationship(
        "ProjectAssignment", back_populates="member", cascade="all, delete-orphan"
    )
    event_assignments = relationship(
        "EventAssignment", back_populates="member", cascade="all, delete-orphan"
    )


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    color = Column(String(20), nullable=False)
    description = Column(Text, nullable=True)
    client = Column(JSON, nullable=True)  # {"name", "email", "mobile", "cc"}
    location = Column(String(255), nullable=True)

    # Schedule window. Dates are inclusive; hours are hour-of-day with an exclusive end.
    # Any bound may be missing, which leaves the window open on that side.
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    start_hour = Column(Integer, nullable=True)
    end_hour = Column(Integer, nullable=True)

    # Planning sections
    brief = Column(Text, nullable=True)
    logistics = Column(Text, nullable=True)
    checklist = Column(JSON, default=list, nullable=True)  # [{"title", "completed", "description"}]
    equipments = Column(JSON, default=list, nullable=True)
    documents = Column(JSON, default=list, nullable=True)  # [{"title", "key"}]

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    company = relationship("Company", back_populates="projects")
    assignments = relationship(
        "ProjectAssignment", back_populates="project", cascade="all, delete-orphan"
    )
    events = relationship(
        "Event", back_populates="project", cascade="all, delete-orphan", order_by="Event.date"
    )


class ProjectAssignment(Base):
    __tablename__ = "project_assignments"
    __table_args__ = (UniqueConstraint("project_id", "member_id", name="uq_project_member"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    member_id = Column(String(36), ForeignKey("members.id"), nullable=False, index=True)
    role_id = Column(String(36), ForeignKey("roles.id"), nullable=True)
    instructions = Column(Text, nullable=True)
    google_event_id = Column(String(255), nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    project = relationship("Project", back_populates="assignments")
    member = relationship("Member", back_populates="project_assignments")
    role = relationship("Role")


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    date = Column(Date, nullable=False, index=True)
    start_hour = Column(Integer, nullable=True)  # hour-of-day, 0-24
    end_hour = Column(Integer, nullable=True)
    location = Column(String(255), nullable=True)
    reminders = Column(JSON, default=default_reminders, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    project = relationship("Project", back_populates="events")
    assignments = relationship(
        "EventAssignment", back_populates="event", cascade="all, delete-orphan"
    )
    custom_reminders = relationship(
        "CustomReminder", back_populates="event", cascade="all, delete-orphan"
    )


class EventAssignment(Base):
    __tablename__ = "event_assignments"
    __table_args__ = (UniqueConstraint("event_id", "member_id", name="uq_event_member"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    member_id = Column(String(36), ForeignKey("members.id"), nullable=False, index=True)
    role_id = Column(String(36), ForeignKey("roles.id"), nullable=True)
    instructions = Column(Text, nullable=True)
    google_event_id = Column(String(255), nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    event = relationship("Event", back_populates="assignments")
    member = relationship("Member", back_populates="event_assignments")
    role = relationship("Role")


class Package(Base):
    __tablename__ = "packages"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    duration = Column(String(100), nullable=False)
    is_popular = Column(Boolean, default=False, nullable=False)
    features = Column(JSON, nullable=True)
    addons = Column(JSON, nullable=True)
    status = Column(String(20), default="active", nullable=False)  # active | inactive

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    company = relationship("Company", back_populates="packages")


class CustomReminder(Base):
    __tablename__ = "custom_reminders"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    reminder_date = Column(Date, nullable=False)
    reminder_hour = Column(Integer, nullable=False)  # 0-23
    message = Column(Text, nullable=True)
    is_sent = Column(Boolean, default=False, nullable=False)
    sent_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    event = relationship("Event", back_populates="custom_reminders")
