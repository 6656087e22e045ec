"""Order schemas - intake, work queue actions and listings"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_contact_number
from ...utils.sanitization import clean_text, validate_and_sanitize_input


class OrderLines(BaseModel):
    branch_id: int
    method: str = Field(..., min_length=1, max_length=20)
    service_id: int
    detergent_id: Optional[int] = None
    softener_id: Optional[int] = None
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("method")
    @classmethod
    def normalize_method(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("notes")
    @classmethod
    def sanitize_notes(cls, v):
        if v is None:
            return v
        return validate_and_sanitize_input(v, max_length=500)


class OrderIntake(OrderLines):
    """Walk-in order recorded by an employee at the counter"""

    customer_name: str = Field(..., min_length=1, max_length=100)
    customer_contact: Optional[str] = Field(None, max_length=20)

    @field_validator("customer_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = clean_text(v)
        if not v:
            raise ValueError("Customer name is required")
        return v

    @field_validator("customer_contact")
    @classmethod
    def validate_contact(cls, v):
        return validate_contact_number(v)


class CustomerOrderCreate(OrderLines):
    """Order placed by a signed-in customer"""


class AcceptOrder(BaseModel):
    weight_kg: float = Field(..., gt=0, le=1000)


class StatusUpdate(BaseModel):
    order_status: str


class MethodInfo(BaseModel):
    code: str
    label: str


class LineInfo(BaseModel):
    id: int
    name: str
    price: float


class OrderResponse(BaseModel):
    id: int
    shop_id: int
    branch_id: int
    customer_id: Optional[int] = None
    customer_name: str
    customer_contact: Optional[str] = None
    method: MethodInfo
    service: LineInfo
    detergent: Optional[LineInfo] = None
    softener: Optional[LineInfo] = None
    weight_kg: Optional[float] = None
    amount: Optional[float] = None
    order_status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderHistoryResponse(BaseModel):
    id: int
    order_id: int
    shop_id: int
    branch_id: Optional[int] = None
    customer_name: str
    customer_contact: Optional[str] = None
    method_code: str
    method_label: str
    service_name: str
    weight_kg: Optional[float] = None
    amount: Optional[float] = None
    order_status: str = "completed"
    ordered_at: datetime
    completed_at: datetime

    class Config:
        from_attributes = True


class BranchOrdersResponse(BaseModel):
    pending: list[OrderResponse]
    work_queue: list[OrderResponse]
    history: list[OrderHistoryResponse]


class TransitionResponse(BaseModel):
    order_id: int
    previous_status: str
    order_status: str
    order: Optional[OrderResponse] = None
    history: Optional[OrderHistoryResponse] = None
