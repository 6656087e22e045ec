"""Shop router - admin shop management and the owner's shop view"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ...auth import OwnerContext, require_admin, require_owner
from ...database import get_db
from ...models import User
from .schemas import ShopCreate, ShopResponse, ShopUpdate
from .service import ShopService

admin_router = APIRouter(prefix="/admin/shops", tags=["Admin"])
owner_router = APIRouter(prefix="/owner", tags=["Owner"])


def get_shop_service(db: Session = Depends(get_db)) -> ShopService:
    """Dependency injection for ShopService"""
    return ShopService(db)


@admin_router.get("", response_model=list[ShopResponse])
async def list_shops(
    _: User = Depends(require_admin),
    service: ShopService = Depends(get_shop_service),
):
    """All shops with their branch locations"""
    return service.list_shops()


@admin_router.post("", response_model=ShopResponse, status_code=201)
async def create_shop(
    data: ShopCreate,
    request: Request,
    admin: User = Depends(require_admin),
    service: ShopService = Depends(get_shop_service),
):
    return service.create_shop(data, admin, request)


@admin_router.put("/{shop_id}", response_model=ShopResponse)
async def update_shop(
    shop_id: int,
    data: ShopUpdate,
    request: Request,
    admin: User = Depends(require_admin),
    service: ShopService = Depends(get_shop_service),
):
    return service.update_shop(shop_id, data, admin, request)


@admin_router.delete("/{shop_id}")
async def delete_shop(
    shop_id: int,
    request: Request,
    admin: User = Depends(require_admin),
    service: ShopService = Depends(get_shop_service),
):
    """Delete a shop along with its branches, staff assignments, orders and history"""
    return service.delete_shop(shop_id, admin, request)


@owner_router.get("/shop-data", response_model=ShopResponse)
async def get_shop_data(
    owner: OwnerContext = Depends(require_owner),
    service: ShopService = Depends(get_shop_service),
):
    return service.get_owner_shop_data(owner)
