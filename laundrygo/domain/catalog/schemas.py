"""Catalog schemas - services, methods and add-on pricing"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...utils.sanitization import clean_text, validate_and_sanitize_input

AddonKind = Literal["detergent", "softener"]


def _name(v):
    if v is None:
        return v
    v = clean_text(v)
    if not v:
        raise ValueError("Name is required")
    return v


def _description(v):
    if v is None:
        return v
    return validate_and_sanitize_input(v, max_length=500)


class ServiceCreate(BaseModel):
    branch_id: int
    name: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., gt=0)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def clean_name(cls, v):
        return _name(v)

    @field_validator("description")
    @classmethod
    def clean_description(cls, v):
        return _description(v)


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, gt=0)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def clean_name(cls, v):
        return _name(v)

    @field_validator("description")
    @classmethod
    def clean_description(cls, v):
        return _description(v)


class ServiceResponse(BaseModel):
    id: int
    name: str
    price: float
    description: Optional[str] = None


class MethodsMap(BaseModel):
    dropoff_enabled: bool = False
    delivery_enabled: bool = False
    pickup_enabled: bool = False
    self_service_enabled: bool = False


class BranchServicesResponse(BaseModel):
    branch_id: int
    methods: MethodsMap
    services: list[ServiceResponse]


class MethodToggle(BaseModel):
    branch_id: int
    method: str
    enabled: bool


class AddonOverrideUpdate(BaseModel):
    branch_id: int
    type: AddonKind
    item_id: int
    is_available: Optional[bool] = None
    custom_price: Optional[float] = Field(None, ge=0)
    display_order: Optional[int] = Field(None, ge=0)


class AddonTypeCreate(BaseModel):
    branch_id: int
    type: AddonKind
    name: str = Field(..., min_length=1, max_length=100)
    base_price: float = Field(..., ge=0)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def clean_name(cls, v):
        return _name(v)

    @field_validator("description")
    @classmethod
    def clean_description(cls, v):
        return _description(v)


class AddonResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    base_price: float
    custom_price: Optional[float] = None
    is_available: bool
    display_order: int
    final_price: float


class BranchAddonsResponse(BaseModel):
    branch_id: int
    detergents: list[AddonResponse]
    softeners: list[AddonResponse]
