"""Member domain schemas - Pydantic models for validation"""

import json
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...shared.validators import validate_email, validate_hex_color, validate_mobile


def _parse_skills(v):
    """Accept a list, a JSON array string or a comma separated string"""
    if v is None or isinstance(v, list):
        return v
    if isinstance(v, str):
        try:
            parsed = json.loads(v)
            if isinstance(parsed, list):
                return [str(s).strip() for s in parsed if str(s).strip()]
        except ValueError:
            pass
        return [s.strip() for s in v.split(",") if s.strip()]
    raise ValueError("Skills must be a list of strings")


class MemberCreate(BaseModel):
    """Schema for adding a member to a company"""

    name: str
    email: str
    roleId: str
    companyId: str
    countryCode: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[list[str]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_mobile(v)

    @field_validator("skills", mode="before")
    @classmethod
    def parse_skills(cls, v):
        return _parse_skills(v)


class MemberUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    roleId: Optional[str] = None
    phone: Optional[str] = None
    countryCode: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[list[str]] = None

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_mobile(v)

    @field_validator("skills", mode="before")
    @classmethod
    def parse_skills(cls, v):
        return _parse_skills(v)

    @model_validator(mode="after")
    def check_any_field(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        return self


class MembersByCompanyRequest(BaseModel):
    """Calendar view of a company's members for one month or one ISO week"""

    companyId: Optional[str] = None
    viewType: Optional[str] = None
    month: Optional[int] = None
    week: Optional[int] = None
    year: Optional[int] = None
    memberId: Optional[str] = None

    @model_validator(mode="after")
    def check_view(self):
        if not self.companyId:
            raise ValueError("Company ID is required")
        if self.viewType not in ("month", "week"):
            raise ValueError("Valid viewType (month or week) is required")
        if self.viewType == "month":
            if not self.month or not self.year:
                raise ValueError("Month and year are required for month view")
            if not 1 <= self.month <= 12:
                raise ValueError("Month must be between 1 and 12")
        if self.viewType == "week":
            if not self.week or not self.year:
                raise ValueError("Week and year are required for week view")
            if not 1 <= self.week <= 53:
                raise ValueError("Week must be between 1 and 53")
        return self


class RingColorUpdate(BaseModel):
    ringColor: str

    @field_validator("ringColor")
    @classmethod
    def validate_color(cls, v):
        if not v or not v.strip():
            raise ValueError("Ring color is required")
        return validate_hex_color(v)


class MemberLogin(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()
