"""Auth domain schemas"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...security_utils import validate_password_length
from ...shared.validators import validate_contact_number, validate_email


class LoginRequest(BaseModel):
    email: str = Field(..., max_length=100)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class RegisterRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=100)
    password: str = Field(..., max_length=128)
    phone: Optional[str] = Field(None, max_length=20)

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_length(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_contact_number(v)


class UserSummary(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    roles: list[str] = []


class LoginResponse(BaseModel):
    accessToken: str
    tokenType: str = "bearer"
    role: str
    redirectTo: str
    user: UserSummary


class AssignmentSummary(BaseModel):
    shop_id: int
    branch_id: Optional[int] = None
    role_in_shop: str


class MeResponse(UserSummary):
    phone: Optional[str] = None
    role: Optional[str] = None
    assignments: list[AssignmentSummary] = []
