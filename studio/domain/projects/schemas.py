"""Project domain schemas - Pydantic models for validation"""

import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...shared.validators import coerce_hour, parse_iso_date, validate_email, validate_hour, validate_mobile


class ClientInfo(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None
    cc: Optional[str] = None

    @model_validator(mode="after")
    def check_client(self):
        if not self.name or not self.name.strip():
            raise ValueError("Client name is required")
        if not self.email or not self.email.strip():
            raise ValueError("Client email is required")
        if not self.mobile or not self.mobile.strip():
            raise ValueError("Client mobile is required")
        try:
            self.email = validate_email(self.email)
        except ValueError:
            raise ValueError("Please provide a valid client email address") from None
        try:
            self.mobile = validate_mobile(self.mobile)
        except ValueError:
            raise ValueError("Please provide a valid client mobile number") from None
        self.name = self.name.strip()
        return self


class AssignmentInput(BaseModel):
    memberId: str
    roleId: Optional[str] = None
    instructions: Optional[str] = None

    @field_validator("memberId")
    @classmethod
    def validate_member(cls, v):
        if not v or not v.strip():
            raise ValueError("Member ID is required for each assignment")
        return v.strip()


def check_event_hours(start_hour: Optional[int], end_hour: Optional[int]) -> None:
    """Both hours present, within the day, start strictly before end"""
    if start_hour is None or end_hour is None:
        raise ValueError("Event start hour and end hour are required")
    validate_hour(start_hour, "startHour")
    validate_hour(end_hour, "endHour")
    if start_hour >= end_hour:
        raise ValueError("End time must be after start time")


class EventInput(BaseModel):
    """One event inside a project payload. Items with an id refer to an existing event."""

    id: Optional[str] = None
    name: Optional[str] = None
    date: Optional[datetime.date] = None
    startHour: Optional[int] = None
    endHour: Optional[int] = None
    location: Optional[str] = None
    reminders: Optional[dict[str, bool]] = None
    assignments: Optional[list[AssignmentInput]] = None

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v):
        return parse_iso_date(v, "date")

    @field_validator("startHour", "endHour", mode="before")
    @classmethod
    def parse_hours(cls, v, info):
        return coerce_hour(v, info.field_name)

    @model_validator(mode="after")
    def check_event(self):
        if not self.name or not self.name.strip():
            raise ValueError("Event name is required")
        if self.date is None:
            raise ValueError("Event date is required")
        check_event_hours(self.startHour, self.endHour)
        if self.assignments is not None and not self.assignments:
            raise ValueError("Each event must have at least one assigned member")
        self.name = self.name.strip()
        return self

    def member_ids(self) -> list[str]:
        return list(dict.fromkeys(a.memberId for a in self.assignments or []))


class _ProjectWindow(BaseModel):
    startDate: Optional[datetime.date] = None
    endDate: Optional[datetime.date] = None
    startHour: Optional[int] = None
    endHour: Optional[int] = None

    @field_validator("startDate", "endDate", mode="before")
    @classmethod
    def parse_dates(cls, v, info):
        return parse_iso_date(v, info.field_name)

    @field_validator("startHour", "endHour", mode="before")
    @classmethod
    def parse_hours(cls, v, info):
        return validate_hour(coerce_hour(v, info.field_name), info.field_name)


class ProjectCreate(_ProjectWindow):
    """Schema for creating a project together with its events"""

    companyId: str
    name: str
    color: str
    description: Optional[str] = None
    client: Optional[ClientInfo] = None
    location: Optional[str] = None
    events: Optional[list[EventInput]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Project name is required")
        return v.strip()

    @field_validator("color")
    @classmethod
    def validate_color(cls, v):
        if not v or not v.strip():
            raise ValueError("Project color is required")
        return v.strip()

    @model_validator(mode="after")
    def check_project(self):
        if not self.events:
            raise ValueError("At least one event is required")
        for event in self.events:
            if event.id:
                raise ValueError("New events cannot carry an id")
            if not event.assignments:
                raise ValueError("Each event must have at least one assigned member")
        return self


class ProjectEdit(_ProjectWindow):
    """
    Partial project update.

    When `events` is given it is the complete new event list: items with an id
    update that event, items without one are created and events left out are
    removed. `isScheduleUpdate` asks for the schedule conflict check.
    """

    projectId: str
    name: Optional[str] = None
    color: Optional[str] = None
    description: Optional[str] = None
    client: Optional[ClientInfo] = None
    location: Optional[str] = None
    isScheduleUpdate: bool = False
    events: Optional[list[EventInput]] = None

    @model_validator(mode="after")
    def check_edit(self):
        if "name" in self.model_fields_set and (not self.name or not self.name.strip()):
            raise ValueError("Project name cannot be empty")
        if self.events is not None and not self.events:
            raise ValueError("At least one event is required")
        return self

    def window_fields(self) -> set[str]:
        return self.model_fields_set & {"startDate", "endDate", "startHour", "endHour"}


class ProjectDelete(BaseModel):
    projectId: str


class CheckProjectName(BaseModel):
    companyId: str
    name: str
    excludeProjectId: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Project name is required")
        return v.strip()


class ProjectMemberAdd(BaseModel):
    projectId: str
    memberId: str
    roleId: Optional[str] = None
    eventId: Optional[str] = None
    instructions: Optional[str] = None


class ProjectMemberRemove(BaseModel):
    projectId: str
    memberId: str
    eventId: Optional[str] = None


class ChecklistItem(BaseModel):
    title: str
    completed: bool = False
    description: Optional[str] = None


class ProjectSectionsUpdate(BaseModel):
    projectId: str
    brief: Optional[str] = None
    logistics: Optional[str] = None
    checklist: Optional[list[ChecklistItem]] = None
    equipments: Optional[list[str]] = None

    @model_validator(mode="after")
    def check_any_section(self):
        if not self.model_fields_set & {"brief", "logistics", "checklist", "equipments"}:
            raise ValueError("At least one section must be provided")
        return self


class DocumentDelete(BaseModel):
    key: str


class InstructionsUpdate(BaseModel):
    instructions: Optional[str] = None
