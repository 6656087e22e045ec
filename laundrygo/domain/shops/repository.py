"""Shop repository - Database operations for shops"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ...models import Shop


class ShopRepository:
    """Repository for shop database operations"""

    @staticmethod
    def list_shops(db: Session) -> list[Shop]:
        return (
            db.query(Shop)
            .options(selectinload(Shop.branches), selectinload(Shop.owner))
            .order_by(Shop.created_at.desc(), Shop.id.desc())
            .all()
        )

    @staticmethod
    def get_shop(db: Session, shop_id: int) -> Optional[Shop]:
        return db.query(Shop).filter(Shop.id == shop_id).first()

    @staticmethod
    def name_taken(db: Session, name: str, exclude_id: Optional[int] = None) -> bool:
        """Case-insensitive shop name check"""
        query = db.query(Shop.id).filter(func.lower(Shop.name) == name.strip().lower())
        if exclude_id is not None:
            query = query.filter(Shop.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def add_shop(db: Session, **shop_data) -> Shop:
        shop = Shop(**shop_data)
        db.add(shop)
        db.flush()
        return shop

    @staticmethod
    def update_shop(db: Session, shop: Shop, **updates) -> Shop:
        for key, value in updates.items():
            if value is not None and hasattr(shop, key):
                setattr(shop, key, value)
        db.commit()
        db.refresh(shop)
        return shop

    @staticmethod
    def delete_shop(db: Session, shop: Shop) -> None:
        """Branches and everything below them, assignments and order history cascade"""
        db.delete(shop)
        db.commit()
