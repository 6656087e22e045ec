"""Staff service - owners hiring, moving and deactivating employees and riders"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...activity_logger import log_activity
from ...auth import OwnerContext
from ...models import Branch, ShopUserAssignment
from ...security_utils import hash_password_bcrypt
from ..branches.repository import BranchRepository
from ..users.repository import UserRepository
from .repository import StaffRepository
from .schemas import StaffCreate, StaffUpdate

logger = logging.getLogger(__name__)


def serialize_staff(assignment: ShopUserAssignment) -> dict:
    branch = assignment.branch
    return {
        "user_id": assignment.user.id,
        "full_name": assignment.user.full_name,
        "email": assignment.user.email,
        "phone": assignment.user.phone,
        "role": assignment.role_in_shop,
        "branch": {"id": branch.id, "name": branch.name} if branch else None,
        "is_active": assignment.is_active,
        "created_at": assignment.created_at,
    }


class StaffService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = StaffRepository()
        self.users = UserRepository()
        self.branches = BranchRepository()

    def _shop_branch(self, owner: OwnerContext, branch_id: int) -> Branch:
        branch = self.branches.get_shop_branch(self.db, branch_id, owner.shop.id)
        if not branch:
            raise HTTPException(status_code=403, detail="Branch does not belong to your shop")
        return branch

    def _assignment(self, owner: OwnerContext, user_id: int) -> ShopUserAssignment:
        assignment = self.repo.get_staff_assignment(self.db, owner.shop.id, user_id)
        if not assignment:
            raise HTTPException(status_code=404, detail="Staff member not found")
        return assignment

    def _log(self, owner: OwnerContext, action: str, assignment_user_id: int, name: str, description: str,
             branch_id: Optional[int], severity: str = "info"):
        log_activity(
            self.db,
            action=action,
            entity_type="user",
            actor=owner.user,
            actor_type="owner",
            entity_id=assignment_user_id,
            entity_name=name,
            description=description,
            severity=severity,
            shop_id=owner.shop.id,
            branch_id=branch_id,
        )

    def list_staff(self, owner: OwnerContext, branch_id: Optional[int]) -> list[dict]:
        return [serialize_staff(a) for a in self.repo.list_staff(self.db, owner.shop.id, branch_id)]

    def create_staff(self, owner: OwnerContext, data: StaffCreate) -> dict:
        branch = self._shop_branch(owner, data.branch_id)
        if self.users.email_exists(self.db, data.email):
            raise HTTPException(status_code=409, detail="Email already registered")

        try:
            user = self.users.add_user(
                self.db,
                email=data.email,
                password_hash=hash_password_bcrypt(data.password),
                full_name=data.full_name,
                phone=data.phone,
            )
            self.users.grant_role(self.db, user, data.role)
            assignment = self.users.add_assignment(
                self.db, user, owner.shop.id, data.role, branch_id=branch.id
            )
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(status_code=409, detail="Email already registered") from e

        self.db.refresh(assignment)
        result = serialize_staff(assignment)
        logger.info(f"✅ {data.role} {user.email} added to branch {branch.id}")
        self._log(owner, "create_user", user.id, result["full_name"],
                  f"Added {data.role} {result['full_name']} to {result['branch']['name']}", branch.id)
        return result

    def update_staff(self, owner: OwnerContext, user_id: int, data: StaffUpdate) -> dict:
        assignment = self._assignment(owner, user_id)
        user = assignment.user

        if data.branch_id is not None:
            assignment.branch_id = self._shop_branch(owner, data.branch_id).id

        try:
            if data.role is not None and data.role != assignment.role_in_shop:
                self.users.revoke_role(self.db, user, assignment.role_in_shop)
                self.users.grant_role(self.db, user, data.role)
                assignment.role_in_shop = data.role

            if data.full_name is not None:
                user.full_name = data.full_name
            if data.phone is not None:
                user.phone = data.phone
            if data.password is not None:
                user.password_hash = hash_password_bcrypt(data.password)

            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Staff update for user {user_id} conflicted: {e}")
            raise HTTPException(status_code=409, detail="Staff member was modified by another request") from e

        self.db.refresh(assignment)
        result = serialize_staff(assignment)
        self._log(owner, "update_user", user_id, result["full_name"],
                  f"Updated staff member {result['full_name']}", assignment.branch_id)
        return result

    def deactivate_staff(self, owner: OwnerContext, user_id: int) -> dict:
        """Soft delete: the assignment is deactivated, the account itself is kept"""
        assignment = self._assignment(owner, user_id)
        assignment.is_active = False
        self.db.commit()

        name = assignment.user.full_name or assignment.user.email
        self._log(owner, "delete_user", user_id, name, f"Removed staff member {name}",
                  assignment.branch_id, severity="warning")
        return {"message": "Staff member removed successfully"}
