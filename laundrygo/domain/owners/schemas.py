"""Owner management schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...security_utils import validate_password_length
from ...shared.validators import validate_email
from ...utils.sanitization import clean_text


class OwnerCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=100)
    password: str = Field(..., max_length=128)
    shop_id: int

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = clean_text(v)
        if not v:
            raise ValueError("Full name is required")
        return v

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_length(v)


class OwnerUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=100)
    shop_id: Optional[int] = None

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, v):
        if v is None:
            return v
        v = clean_text(v)
        if not v:
            raise ValueError("Full name is required")
        return v

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)


class OwnerShop(BaseModel):
    id: int
    name: str


class OwnerResponse(BaseModel):
    user_id: int
    full_name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    is_active: bool
    shop: OwnerShop
    created_at: Optional[datetime] = None
