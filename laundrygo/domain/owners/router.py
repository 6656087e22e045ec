"""Owner router - admin management of shop owners"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...models import User
from .schemas import OwnerCreate, OwnerResponse, OwnerUpdate
from .service import OwnerService

router = APIRouter(prefix="/admin/owners", tags=["Admin"])


def get_owner_service(db: Session = Depends(get_db)) -> OwnerService:
    """Dependency injection for OwnerService"""
    return OwnerService(db)


@router.get("", response_model=list[OwnerResponse])
async def list_owners(
    _: User = Depends(require_admin),
    service: OwnerService = Depends(get_owner_service),
):
    return service.list_owners()


@router.post("", response_model=OwnerResponse, status_code=201)
async def create_owner(
    data: OwnerCreate,
    request: Request,
    admin: User = Depends(require_admin),
    service: OwnerService = Depends(get_owner_service),
):
    """Create an owner account and attach it to a shop without an owner"""
    return service.create_owner(data, admin, request)


@router.put("/{user_id}", response_model=OwnerResponse)
async def update_owner(
    user_id: int,
    data: OwnerUpdate,
    request: Request,
    admin: User = Depends(require_admin),
    service: OwnerService = Depends(get_owner_service),
):
    return service.update_owner(user_id, data, admin, request)
