"""Shop service - Business logic for shop management"""

import logging

from fastapi import HTTPException, Request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...activity_logger import log_activity, log_admin_action
from ...auth import OwnerContext
from ...models import Shop, User
from .repository import ShopRepository
from .schemas import ShopCreate, ShopUpdate

logger = logging.getLogger(__name__)

DUPLICATE_SHOP_NAME = "A shop with this name already exists"


def serialize_shop(shop: Shop, active_branches_only: bool = False) -> dict:
    branches = [b for b in shop.branches if b.is_active or not active_branches_only]
    return {
        "id": shop.id,
        "name": shop.name,
        "description": shop.description,
        "logo_url": shop.logo_url,
        "owner_id": shop.owner_id,
        "owner_name": shop.owner.full_name if shop.owner else None,
        "created_at": shop.created_at,
        "branches": [
            {
                "id": b.id,
                "name": b.name,
                "address": b.address,
                "lat": b.latitude,
                "lng": b.longitude,
                "is_active": b.is_active,
            }
            for b in branches
        ],
    }


class ShopService:
    """Service layer for shop business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ShopRepository()

    def list_shops(self) -> list[dict]:
        return [serialize_shop(shop) for shop in self.repo.list_shops(self.db)]

    def get_shop(self, shop_id: int) -> Shop:
        shop = self.repo.get_shop(self.db, shop_id)
        if not shop:
            raise HTTPException(status_code=404, detail="Shop not found")
        return shop

    def create_shop(self, data: ShopCreate, admin: User, request: Request) -> dict:
        if self.repo.name_taken(self.db, data.name):
            raise HTTPException(status_code=409, detail=DUPLICATE_SHOP_NAME)

        try:
            shop = self.repo.add_shop(self.db, name=data.name, description=data.description)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(status_code=409, detail=DUPLICATE_SHOP_NAME) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create shop {data.name}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create shop") from e

        self.db.refresh(shop)
        result = serialize_shop(shop)
        logger.info(f"✅ Shop created: {shop.name}")
        log_admin_action(self.db, admin, "create_shop", "shop", shop.id, shop.name, None, request)
        return result

    def update_shop_details(self, shop: Shop, data: ShopUpdate) -> Shop:
        """Shared by the admin shop editor and the owner settings page"""
        if data.name is not None and self.repo.name_taken(self.db, data.name, exclude_id=shop.id):
            raise HTTPException(status_code=409, detail=DUPLICATE_SHOP_NAME)

        try:
            return self.repo.update_shop(self.db, shop, name=data.name, description=data.description)
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(status_code=409, detail=DUPLICATE_SHOP_NAME) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update shop {shop.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update shop") from e

    def update_shop(self, shop_id: int, data: ShopUpdate, admin: User, request: Request) -> dict:
        shop = self.update_shop_details(self.get_shop(shop_id), data)
        result = serialize_shop(shop)
        log_admin_action(self.db, admin, "update_shop", "shop", shop.id, shop.name, None, request)
        return result

    def delete_shop(self, shop_id: int, admin: User, request: Request) -> dict:
        shop = self.get_shop(shop_id)
        name = shop.name

        try:
            self.repo.delete_shop(self.db, shop)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to delete shop {shop_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete shop") from e

        logger.info(f"✅ Shop deleted with all related data: {name}")
        log_admin_action(
            self.db, admin, "delete_shop", "shop", shop_id, name,
            f"Deleted shop {name} and all related data", request,
        )
        return {"message": "Shop and all related data deleted successfully"}

    def get_owner_shop_data(self, owner: OwnerContext) -> dict:
        """The owner's shop with its active branches"""
        return serialize_shop(owner.shop, active_branches_only=True)

    def update_owner_shop(self, owner: OwnerContext, data: ShopUpdate) -> dict:
        shop = self.update_shop_details(owner.shop, data)
        result = serialize_shop(shop)
        log_activity(
            self.db,
            action="update_shop",
            entity_type="shop",
            actor=owner.user,
            actor_type="owner",
            entity_id=shop.id,
            entity_name=shop.name,
            description="Updated shop details",
            shop_id=shop.id,
        )
        return result
