"""Branch domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_latitude, validate_longitude
from ...utils.sanitization import clean_text


def _required_text(v):
    if v is None:
        return v
    v = clean_text(v)
    if not v:
        raise ValueError("Field cannot be blank")
    return v


class BranchBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1, max_length=200)
    latitude: float
    longitude: float

    @field_validator("name", "address")
    @classmethod
    def strip_text(cls, v):
        return _required_text(v)

    @field_validator("latitude")
    @classmethod
    def check_latitude(cls, v):
        return validate_latitude(v)

    @field_validator("longitude")
    @classmethod
    def check_longitude(cls, v):
        return validate_longitude(v)


class BranchCreate(BranchBase):
    """Owner-side creation; the shop comes from the owner"""


class AdminBranchCreate(BranchBase):
    shop_id: int


class BranchUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = Field(None, min_length=1, max_length=200)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_active: Optional[bool] = None

    @field_validator("name", "address")
    @classmethod
    def strip_text(cls, v):
        return _required_text(v)

    @field_validator("latitude")
    @classmethod
    def check_latitude(cls, v):
        return validate_latitude(v)

    @field_validator("longitude")
    @classmethod
    def check_longitude(cls, v):
        return validate_longitude(v)


class BranchResponse(BaseModel):
    id: int
    shop_id: int
    name: str
    address: str
    latitude: float
    longitude: float
    is_active: bool
    created_at: Optional[datetime] = None
    shop_name: Optional[str] = None

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class BranchListResponse(BaseModel):
    branches: list[BranchResponse]
    pagination: Pagination
