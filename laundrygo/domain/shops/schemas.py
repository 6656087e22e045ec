"""Shop domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...utils.sanitization import clean_text, validate_and_sanitize_input


class ShopCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = clean_text(v)
        if not v:
            raise ValueError("Shop name is required")
        return v

    @field_validator("description")
    @classmethod
    def sanitize_description(cls, v):
        if v is None:
            return v
        return validate_and_sanitize_input(v, max_length=500)


class ShopUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        if v is None:
            return v
        v = clean_text(v)
        if not v:
            raise ValueError("Shop name is required")
        return v

    @field_validator("description")
    @classmethod
    def sanitize_description(cls, v):
        if v is None:
            return v
        return validate_and_sanitize_input(v, max_length=500)


class ShopBranchSummary(BaseModel):
    id: int
    name: str
    address: str
    lat: float
    lng: float
    is_active: bool


class ShopResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    owner_id: Optional[int] = None
    owner_name: Optional[str] = None
    created_at: Optional[datetime] = None
    branches: list[ShopBranchSummary] = []
