"""Staff repository - employee and delivery assignments of a shop"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import ShopUserAssignment
from .schemas import STAFF_ROLES


class StaffRepository:
    @staticmethod
    def list_staff(db: Session, shop_id: int, branch_id: Optional[int] = None) -> list[ShopUserAssignment]:
        query = (
            db.query(ShopUserAssignment)
            .options(joinedload(ShopUserAssignment.user), joinedload(ShopUserAssignment.branch))
            .filter(
                ShopUserAssignment.shop_id == shop_id,
                ShopUserAssignment.role_in_shop.in_(STAFF_ROLES),
                ShopUserAssignment.is_active.is_(True),
            )
        )
        if branch_id is not None:
            query = query.filter(ShopUserAssignment.branch_id == branch_id)
        return query.order_by(ShopUserAssignment.created_at.desc(), ShopUserAssignment.id.desc()).all()

    @staticmethod
    def get_staff_assignment(db: Session, shop_id: int, user_id: int) -> Optional[ShopUserAssignment]:
        return (
            db.query(ShopUserAssignment)
            .filter(
                ShopUserAssignment.shop_id == shop_id,
                ShopUserAssignment.user_id == user_id,
                ShopUserAssignment.role_in_shop.in_(STAFF_ROLES),
                ShopUserAssignment.is_active.is_(True),
            )
            .first()
        )
