"""Recommendation schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class RecommendRequest(BaseModel):
    query: Optional[str] = Field(None, validate_default=True)

    @field_validator("query")
    @classmethod
    def validate_query(cls, v):
        if not v or not v.strip():
            raise ValueError("Search query is required")
        return v.strip()


class QuickSearchRequest(BaseModel):
    search: Optional[str] = Field(None, validate_default=True)
    limit: int = 10

    @field_validator("search")
    @classmethod
    def validate_search(cls, v):
        if not v or not v.strip():
            raise ValueError("Search term is required")
        return v.strip()

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, v):
        if v < 1 or v > 50:
            raise ValueError("Limit must be between 1 and 50")
        return v


class Requirements(BaseModel):
    """Structured requirements extracted from a free-text query"""

    eventType: str = "general"
    minBudget: Optional[float] = None
    maxBudget: Optional[float] = None
    requiredFeatures: list[str] = []
    duration: Optional[str] = None
    location: Optional[str] = None
    specialRequirements: list[str] = []
