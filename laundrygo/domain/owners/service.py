"""Owner service - admin management of shop owner accounts"""

import logging

from fastapi import HTTPException, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...activity_logger import log_admin_action
from ...models import ShopUserAssignment, User
from ...security_utils import hash_password_bcrypt
from ..shops.repository import ShopRepository
from ..users.repository import UserRepository
from .repository import OwnerRepository
from .schemas import OwnerCreate, OwnerUpdate

logger = logging.getLogger(__name__)


def serialize_owner(assignment: ShopUserAssignment) -> dict:
    return {
        "user_id": assignment.user.id,
        "full_name": assignment.user.full_name,
        "email": assignment.user.email,
        "phone": assignment.user.phone,
        "is_active": assignment.is_active,
        "shop": {"id": assignment.shop.id, "name": assignment.shop.name},
        "created_at": assignment.created_at,
    }


class OwnerService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = OwnerRepository()
        self.users = UserRepository()
        self.shops = ShopRepository()

    def list_owners(self) -> list[dict]:
        return [serialize_owner(a) for a in self.repo.list_owner_assignments(self.db)]

    def _shop_is_owned(self, shop, exclude_user_id=None) -> bool:
        if shop.owner_id is not None and shop.owner_id != exclude_user_id:
            return True
        return self.repo.shop_has_owner(self.db, shop.id, exclude_user_id)

    def create_owner(self, data: OwnerCreate, admin: User, request: Request) -> dict:
        shop = self.shops.get_shop(self.db, data.shop_id)
        if not shop:
            raise HTTPException(status_code=404, detail="Shop not found")
        if self._shop_is_owned(shop):
            raise HTTPException(status_code=409, detail="This shop already has an owner")
        if self.users.email_exists(self.db, data.email):
            raise HTTPException(status_code=409, detail="Email already registered")

        try:
            user = self.users.add_user(
                self.db,
                email=data.email,
                password_hash=hash_password_bcrypt(data.password),
                full_name=data.full_name,
            )
            self.users.grant_role(self.db, user, "owner")
            assignment = self.users.add_assignment(self.db, user, shop.id, "owner")
            shop.owner_id = user.id
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(status_code=409, detail="Email already registered") from e

        self.db.refresh(assignment)
        result = serialize_owner(assignment)
        logger.info(f"✅ Owner {user.email} created for shop {shop.name}")
        log_admin_action(
            self.db, admin, "create_owner", "user", user.id, user.email,
            f"Created owner for shop {result['shop']['name']}", request,
        )
        return result

    def update_owner(self, user_id: int, data: OwnerUpdate, admin: User, request: Request) -> dict:
        assignment = self.repo.get_owner_assignment(self.db, user_id)
        if not assignment:
            raise HTTPException(status_code=404, detail="Owner not found")
        user = assignment.user

        if data.email is not None and self.users.email_exists(self.db, data.email, exclude_user_id=user.id):
            raise HTTPException(status_code=409, detail="Email already registered")

        if data.shop_id is not None and data.shop_id != assignment.shop_id:
            new_shop = self.shops.get_shop(self.db, data.shop_id)
            if not new_shop:
                raise HTTPException(status_code=404, detail="Shop not found")
            if self._shop_is_owned(new_shop, exclude_user_id=user.id):
                raise HTTPException(status_code=409, detail="This shop already has an owner")

            old_shop = assignment.shop
            if old_shop.owner_id == user.id:
                old_shop.owner_id = None
            assignment.shop_id = new_shop.id
            new_shop.owner_id = user.id

        if data.full_name is not None:
            user.full_name = data.full_name
        if data.email is not None:
            user.email = data.email

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(status_code=409, detail="Email already registered") from e

        self.db.refresh(assignment)
        result = serialize_owner(assignment)
        log_admin_action(self.db, admin, "update_owner", "user", user_id, result["email"], None, request)
        return result
