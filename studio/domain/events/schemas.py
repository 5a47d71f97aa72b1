"""Event domain schemas - Pydantic models for validation"""

import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...shared.validators import coerce_hour, parse_iso_date, validate_hour
from ..projects.schemas import AssignmentInput, check_event_hours


class EventCreate(BaseModel):
    """Schema for adding an event to an existing project"""

    projectId: str
    companyId: str
    name: Optional[str] = None
    date: Optional[datetime.date] = None
    startHour: Optional[int] = None
    endHour: Optional[int] = None
    location: Optional[str] = None
    reminders: Optional[dict[str, bool]] = None
    assignments: list[AssignmentInput] = []

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
        if not self.assignments:
            raise ValueError("Each event must have at least one assigned member")
        self.name = self.name.strip()
        return self

    def member_ids(self) -> list[str]:
        return list(dict.fromkeys(a.memberId for a in self.assignments))


class EventUpdate(BaseModel):
    name: Optional[str] = None
    date: Optional[datetime.date] = None
    startHour: Optional[int] = None
    endHour: Optional[int] = None
    location: Optional[str] = None
    reminders: Optional[dict[str, bool]] = None

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v):
        return parse_iso_date(v, "date")

    @field_validator("startHour", "endHour", mode="before")
    @classmethod
    def parse_hours(cls, v, info):
        return validate_hour(coerce_hour(v, info.field_name), info.field_name)

    @model_validator(mode="after")
    def check_update(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        if "name" in self.model_fields_set and (not self.name or not self.name.strip()):
            raise ValueError("Event name cannot be empty")
        if self.startHour is not None and self.endHour is None:
            raise ValueError("End hour is required when start hour is provided")
        if self.endHour is not None and self.startHour is None:
            raise ValueError("Start hour is required when end hour is provided")
        if self.startHour is not None and self.startHour >= self.endHour:
            raise ValueError("End time must be after start time")
        return self


class EventDelete(BaseModel):
    eventId: str
