"""Staff router - owner management of employees and delivery riders"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import OwnerContext, require_owner
from ...database import get_db
from .schemas import StaffCreate, StaffResponse, StaffUpdate
from .service import StaffService

router = APIRouter(prefix="/owner/users", tags=["Owner"])


def get_staff_service(db: Session = Depends(get_db)) -> StaffService:
    """Dependency injection for StaffService"""
    return StaffService(db)


@router.get("", response_model=list[StaffResponse])
async def list_staff(
    branch_id: Optional[int] = Query(None),
    owner: OwnerContext = Depends(require_owner),
    service: StaffService = Depends(get_staff_service),
):
    return service.list_staff(owner, branch_id)


@router.post("", response_model=StaffResponse, status_code=201)
async def create_staff(
    data: StaffCreate,
    owner: OwnerContext = Depends(require_owner),
    service: StaffService = Depends(get_staff_service),
):
    """Create an employee or delivery account for one of the owner's branches"""
    return service.create_staff(owner, data)


@router.put("/{user_id}", response_model=StaffResponse)
async def update_staff(
    user_id: int,
    data: StaffUpdate,
    owner: OwnerContext = Depends(require_owner),
    service: StaffService = Depends(get_staff_service),
):
    return service.update_staff(owner, user_id, data)


@router.delete("/{user_id}")
async def delete_staff(
    user_id: int,
    owner: OwnerContext = Depends(require_owner),
    service: StaffService = Depends(get_staff_service),
):
    return service.deactivate_staff(owner, user_id)
