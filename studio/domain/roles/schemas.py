"""Role domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator


class RoleCreate(BaseModel):
    companyId: str
    name: str
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Role name is required")
        if len(v.strip()) > 100:
            raise ValueError("Role name must be 100 characters or less")
        return v.strip()


class RoleUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Role name cannot be empty")
        return v.strip() if v else v


class CompanyRolesRequest(BaseModel):
    companyId: str
