"""Package domain schemas - Pydantic models for validation"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def _check_price(v):
    if v is None:
        return v
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ValueError("Price must be a positive number")
    if v < 0:
        raise ValueError("Price must be a positive number")
    return v


def _check_features(v):
    if v is not None and not isinstance(v, list):
        raise ValueError("Features must be an array")
    return v


class PackageCreate(BaseModel):
    """Schema for creating a package"""

    companyId: Optional[str] = None
    name: Optional[str] = None
    price: Optional[float] = None
    duration: Optional[str] = None
    status: Optional[Literal["active", "inactive"]] = None
    isPopular: bool = False
    features: Optional[list[str]] = None
    addons: Optional[dict[str, Any]] = None

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v):
        return _check_price(v)

    @field_validator("features", mode="before")
    @classmethod
    def validate_features(cls, v):
        return _check_features(v)

    @model_validator(mode="after")
    def check_required(self):
        if not self.name or self.price is None or not self.duration or not self.status or not self.companyId:
            raise ValueError("All required fields must be provided")
        return self


class PackageUpdate(BaseModel):
    name: Optional[str] = None
    price: Optional[float] = None
    duration: Optional[str] = None
    status: Optional[Literal["active", "inactive"]] = None
    isPopular: Optional[bool] = None
    features: Optional[list[str]] = None
    addons: Optional[dict[str, Any]] = None

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v):
        return _check_price(v)

    @field_validator("features", mode="before")
    @classmethod
    def validate_features(cls, v):
        return _check_features(v)


class CompanyPrice(BaseModel):
    price: Optional[float] = Field(None, validate_default=True)

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v):
        if v is None:
            raise ValueError("Price is required")
        return _check_price(v)
