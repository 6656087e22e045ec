"""Owner repository - owner assignments"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import ShopUserAssignment


class OwnerRepository:
    @staticmethod
    def list_owner_assignments(db: Session) -> list[ShopUserAssignment]:
        return (
            db.query(ShopUserAssignment)
            .options(joinedload(ShopUserAssignment.user), joinedload(ShopUserAssignment.shop))
            .filter(ShopUserAssignment.role_in_shop == "owner")
            .order_by(ShopUserAssignment.created_at.desc(), ShopUserAssignment.id.desc())
            .all()
        )

    @staticmethod
    def get_owner_assignment(db: Session, user_id: int) -> Optional[ShopUserAssignment]:
        return (
            db.query(ShopUserAssignment)
            .filter(ShopUserAssignment.user_id == user_id, ShopUserAssignment.role_in_shop == "owner")
            .first()
        )

    @staticmethod
    def shop_has_owner(db: Session, shop_id: int, exclude_user_id: Optional[int] = None) -> bool:
        query = db.query(ShopUserAssignment.id).filter(
            ShopUserAssignment.shop_id == shop_id,
            ShopUserAssignment.role_in_shop == "owner",
            ShopUserAssignment.is_active.is_(True),
        )
        if exclude_user_id is not None:
            query = query.filter(ShopUserAssignment.user_id != exclude_user_id)
        return query.first() is not None
