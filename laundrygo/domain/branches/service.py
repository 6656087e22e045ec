"""Branch service - Business logic for admin and owner branch management"""

import logging
import math
from typing import Optional

from fastapi import HTTPException, Request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...activity_logger import log_activity, log_admin_action
from ...auth import OwnerContext
from ...models import Branch, User
from .repository import BranchRepository
from .schemas import AdminBranchCreate, BranchCreate, BranchUpdate

logger = logging.getLogger(__name__)


def serialize_branch(branch: Branch) -> dict:
    return {
        "id": branch.id,
        "shop_id": branch.shop_id,
        "name": branch.name,
        "address": branch.address,
        "latitude": branch.latitude,
        "longitude": branch.longitude,
        "is_active": branch.is_active,
        "created_at": branch.created_at,
        "shop_name": branch.shop.name if branch.shop else None,
    }


class BranchService:
    """Service layer for branch business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BranchRepository()

    def _create(self, shop_id: int, data: BranchCreate) -> Branch:
        if self.repo.name_taken(self.db, shop_id, data.name):
            raise HTTPException(status_code=409, detail="A branch with this name already exists in this shop")

        try:
            branch = self.repo.add_branch(
                self.db,
                shop_id,
                name=data.name,
                address=data.address,
                latitude=data.latitude,
                longitude=data.longitude,
            )
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(
                status_code=409, detail="A branch with this name already exists in this shop"
            ) from e

        self.db.refresh(branch)
        logger.info(f"✅ Branch created: {branch.name} (shop {shop_id})")
        return branch

    def _update(self, branch: Branch, data: BranchUpdate) -> Branch:
        if data.name is not None and self.repo.name_taken(
            self.db, branch.shop_id, data.name, exclude_id=branch.id
        ):
            raise HTTPException(status_code=409, detail="A branch with this name already exists in this shop")

        try:
            return self.repo.update_branch(
                self.db,
                branch,
                name=data.name,
                address=data.address,
                latitude=data.latitude,
                longitude=data.longitude,
                is_active=data.is_active,
            )
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(
                status_code=409, detail="A branch with this name already exists in this shop"
            ) from e

    def _delete(self, branch: Branch) -> None:
        try:
            self.repo.delete_branch(self.db, branch)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to delete branch {branch.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete branch") from e

    # ========================================================================
    # ADMIN
    # ========================================================================

    def list_branches(
        self, page: int, limit: int, shop_id: Optional[int], search: Optional[str]
    ) -> dict:
        branches, total = self.repo.list_branches(self.db, page, limit, shop_id, search)
        return {
            "branches": [serialize_branch(b) for b in branches],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": math.ceil(total / limit) if total else 0,
            },
        }

    def admin_create_branch(self, data: AdminBranchCreate, admin: User, request: Request) -> dict:
        shop = self.repo.get_shop(self.db, data.shop_id)
        if not shop:
            raise HTTPException(status_code=404, detail="Shop not found")

        branch = self._create(shop.id, data)
        result = serialize_branch(branch)
        log_admin_action(
            self.db, admin, "create_branch", "branch", branch.id, branch.name,
            f"Created branch {branch.name} for shop {shop.name}", request,
        )
        return result

    def admin_update_branch(self, branch_id: int, data: BranchUpdate, admin: User, request: Request) -> dict:
        branch = self.repo.get_branch(self.db, branch_id)
        if not branch:
            raise HTTPException(status_code=404, detail="Branch not found")

        branch = self._update(branch, data)
        result = serialize_branch(branch)
        log_admin_action(
            self.db, admin, "update_branch", "branch", branch.id, branch.name, None, request
        )
        return result

    def admin_delete_branch(self, branch_id: int, admin: User, request: Request) -> dict:
        branch = self.repo.get_branch(self.db, branch_id)
        if not branch:
            raise HTTPException(status_code=404, detail="Branch not found")

        name = branch.name
        self._delete(branch)
        logger.info(f"✅ Branch deleted by admin: {name}")
        log_admin_action(
            self.db, admin, "delete_branch", "branch", branch_id, name, f"Deleted branch {name}", request
        )
        return {"message": "Branch deleted successfully"}

    # ========================================================================
    # OWNER
    # ========================================================================

    def get_owner_branch(self, owner: OwnerContext, branch_id: int) -> Branch:
        branch = self.repo.get_shop_branch(self.db, branch_id, owner.shop.id)
        if not branch:
            raise HTTPException(status_code=404, detail="Branch not found")
        return branch

    def resolve_owner_branch(self, owner: OwnerContext, branch_id: Optional[int]) -> Branch:
        """The requested branch of the owner's shop, or its first active branch"""
        if branch_id is not None:
            return self.get_owner_branch(owner, branch_id)

        active = self.repo.list_shop_branches(self.db, owner.shop.id, active_only=True)
        if not active:
            raise HTTPException(status_code=404, detail="No active branch found")
        return active[0]

    def owner_list_branches(self, owner: OwnerContext) -> list[dict]:
        return [serialize_branch(b) for b in self.repo.list_shop_branches(self.db, owner.shop.id)]

    def owner_create_branch(self, owner: OwnerContext, data: BranchCreate) -> dict:
        shop_id = owner.shop.id
        branch = self._create(shop_id, data)
        result = serialize_branch(branch)
        log_activity(
            self.db,
            action="create_branch",
            entity_type="branch",
            actor=owner.user,
            actor_type="owner",
            entity_id=branch.id,
            entity_name=branch.name,
            description=f"Created branch {branch.name}",
            shop_id=shop_id,
            branch_id=branch.id,
        )
        return result

    def owner_update_branch(self, owner: OwnerContext, branch_id: int, data: BranchUpdate) -> dict:
        branch = self._update(self.get_owner_branch(owner, branch_id), data)
        result = serialize_branch(branch)
        log_activity(
            self.db,
            action="update_branch",
            entity_type="branch",
            actor=owner.user,
            actor_type="owner",
            entity_id=branch.id,
            entity_name=branch.name,
            description=f"Updated branch {branch.name}",
            shop_id=branch.shop_id,
            branch_id=branch.id,
        )
        return result

    def owner_delete_branch(self, owner: OwnerContext, branch_id: int) -> dict:
        branch = self.get_owner_branch(owner, branch_id)
        if self.repo.has_open_orders(self.db, branch.id):
            raise HTTPException(status_code=400, detail="Cannot delete branch with existing orders")

        shop_id = branch.shop_id
        name = branch.name
        self._delete(branch)
        log_activity(
            self.db,
            action="delete_branch",
            entity_type="branch",
            actor=owner.user,
            actor_type="owner",
            entity_id=branch_id,
            entity_name=name,
            description=f"Deleted branch {name}",
            severity="warning",
            shop_id=shop_id,
        )
        return {"message": "Branch deleted successfully"}
