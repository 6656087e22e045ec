"""Owner settings schemas - opening hours and branch contacts"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_time_of_day
from ...utils.sanitization import clean_text

ContactType = Literal["phone", "email", "facebook", "messenger", "other"]


class OperatingHoursEntry(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6)  # 0 = Sunday
    open_time: str = "09:00"
    close_time: str = "17:00"
    is_closed: bool = False

    @field_validator("open_time", "close_time")
    @classmethod
    def check_time(cls, v: str) -> str:
        return validate_time_of_day(v)


class OperatingHoursUpdate(BaseModel):
    branch_id: int
    hours: list[OperatingHoursEntry] = Field(..., min_length=1, max_length=7)


class ContactEntry(BaseModel):
    contact_type: ContactType
    value: str = Field(..., min_length=1, max_length=200)
    is_primary: bool = False

    @field_validator("value")
    @classmethod
    def strip_value(cls, v: str) -> str:
        v = clean_text(v)
        if not v:
            raise ValueError("Contact value is required")
        return v


class ContactsUpdate(BaseModel):
    branch_id: int
    contacts: list[ContactEntry] = Field(default_factory=list, max_length=20)
