"""Scheduling schemas - Availability request validation"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...shared.validators import coerce_hour, parse_iso_date


class AvailabilityRequest(BaseModel):
    """Window to check member availability against"""

    companyId: Optional[str] = None
    startDate: Optional[date] = None
    endDate: Optional[date] = None
    startHour: Optional[int] = None
    endHour: Optional[int] = None
    excludeProjectId: Optional[str] = None

    @field_validator("startDate", "endDate", mode="before")
    @classmethod
    def parse_dates(cls, v, info):
        return parse_iso_date(v, info.field_name)

    @field_validator("startHour", "endHour", mode="before")
    @classmethod
    def parse_hours(cls, v, info):
        return coerce_hour(v, info.field_name)

    @model_validator(mode="after")
    def check_window(self):
        if (
            not self.companyId
            or self.startDate is None
            or self.endDate is None
            or self.startHour is None
            or self.endHour is None
        ):
            raise ValueError("Company ID, start date, end date, start hour, and end hour are required")
        if self.startDate > self.endDate:
            raise ValueError("Start date cannot be after end date")
        for field in ("startHour", "endHour"):
            value = getattr(self, field)
            if value < 0 or value > 24:
                raise ValueError(f"{field} must be a number between 0 and 24")
        if self.startHour >= self.endHour:
            raise ValueError("Start hour cannot be after or equal to end hour")
        return self
