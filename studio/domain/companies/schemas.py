"""Company domain schemas - Registration, login and password reset"""

from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email

UserType = Literal["company", "member"]


class CompanyRegister(BaseModel):
    name: str
    email: str
    password: str
    country: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Company name is required")
        return v.strip()

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters long")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class ForgotPasswordRequest(BaseModel):
    email: str
    userType: UserType = "company"

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class VerifyOtpRequest(ForgotPasswordRequest):
    otp: str


class ResetPasswordRequest(VerifyOtpRequest):
    newPassword: str

    @field_validator("newPassword")
    @classmethod
    def validate_password(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters long")
        return v
