"""Custom reminder schemas - Pydantic models for validation"""

import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...shared.validators import coerce_hour, parse_iso_date


def _check_reminder_hour(value: Optional[int]) -> Optional[int]:
    if value is not None and not 0 <= value <= 23:
        raise ValueError("Reminder hour must be between 0 and 23")
    return value


class CustomReminderCreate(BaseModel):
    eventId: Optional[str] = None
    reminderDate: Optional[datetime.date] = None
    reminderHour: Optional[int] = None
    message: Optional[str] = None

    @field_validator("reminderDate", mode="before")
    @classmethod
    def parse_date(cls, v):
        return parse_iso_date(v, "reminderDate")

    @field_validator("reminderHour", mode="before")
    @classmethod
    def parse_hour(cls, v):
        return _check_reminder_hour(coerce_hour(v, "reminderHour"))

    @model_validator(mode="after")
    def check_required(self):
        if not self.eventId or self.reminderDate is None or self.reminderHour is None:
            raise ValueError("Event ID, reminder date and reminder hour are required")
        return self


class CustomReminderUpdate(BaseModel):
    reminderDate: Optional[datetime.date] = None
    reminderHour: Optional[int] = None
    message: Optional[str] = None

    @field_validator("reminderDate", mode="before")
    @classmethod
    def parse_date(cls, v):
        return parse_iso_date(v, "reminderDate")

    @field_validator("reminderHour", mode="before")
    @classmethod
    def parse_hour(cls, v):
        return _check_reminder_hour(coerce_hour(v, "reminderHour"))


class ToggleSent(BaseModel):
    isSent: bool

    @field_validator("isSent", mode="before")
    @classmethod
    def require_bool(cls, v):
        if not isinstance(v, bool):
            raise ValueError("isSent must be a boolean")
        return v
