"""Staff schemas - employees and delivery riders managed by shop owners"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...security_utils import validate_password_length
from ...shared.validators import validate_contact_number, validate_email
from ...utils.sanitization import clean_text

STAFF_ROLES = ("employee", "delivery")
ROLE_ALIASES = {"deliveryman": "delivery", "rider": "delivery"}


def normalize_staff_role(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip().lower()
    v = ROLE_ALIASES.get(v, v)
    if v not in STAFF_ROLES:
        raise ValueError("Role must be 'employee' or 'delivery'")
    return v


class StaffCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=100)
    password: str = Field(..., max_length=128)
    role: str
    branch_id: int
    phone: Optional[str] = Field(None, max_length=20)

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

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str) -> str:
        return normalize_staff_role(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_contact_number(v)


class StaffUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=100)
    password: Optional[str] = Field(None, max_length=128)
    role: Optional[str] = None
    branch_id: Optional[int] = None
    phone: Optional[str] = Field(None, max_length=20)

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, v):
        if v is None:
            return v
        v = clean_text(v)
        if not v:
            raise ValueError("Full name is required")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        if v is None:
            return v
        return validate_password_length(v)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        return normalize_staff_role(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_contact_number(v)


class StaffBranch(BaseModel):
    id: int
    name: str


class StaffResponse(BaseModel):
    user_id: int
    full_name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    role: str
    branch: Optional[StaffBranch] = None
    is_active: bool
    created_at: Optional[datetime] = None
