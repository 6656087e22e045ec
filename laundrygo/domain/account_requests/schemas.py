"""Account request schemas - public submission and admin review"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_email, validate_latitude, validate_longitude
from ...utils.sanitization import clean_text


class AccountRequestCreate(BaseModel):
    """Application submitted by a prospective shop owner"""

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=1, max_length=100)
    contact: str = Field(..., min_length=1, max_length=20)
    shopName: str = Field(..., min_length=1, max_length=100)
    shopAddress: str = Field(..., min_length=1, max_length=200)
    latitude: float
    longitude: float

    @field_validator("name", "contact", "shopName", "shopAddress")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = clean_text(v)
        if not v:
            raise ValueError("Field cannot be blank")
        return v

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("latitude")
    @classmethod
    def check_latitude(cls, v: float) -> float:
        return validate_latitude(v)

    @field_validator("longitude")
    @classmethod
    def check_longitude(cls, v: float) -> float:
        return validate_longitude(v)


class AccountRequestReview(BaseModel):
    action: str


class AccountRequestResponse(BaseModel):
    id: int
    name: str
    email: str
    contact: str
    shop_name: str
    shop_address: str
    latitude: float
    longitude: float
    status: str
    submitted_at: Optional[datetime] = None

    class Config:
        from_attributes = True
