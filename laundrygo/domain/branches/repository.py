"""Branch repository - Database operations for branches"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from ...models import Branch, BranchMethod, BranchOperatingHours, Order, Shop, ShopMethod

DEFAULT_OPEN_TIME = "09:00"
DEFAULT_CLOSE_TIME = "17:00"
CLOSED_DAYS = {0}  # Sunday
DISABLED_METHODS = {"self_service"}


class BranchRepository:
    """Repository for branch database operations"""

    @staticmethod
    def get_branch(db: Session, branch_id: int) -> Optional[Branch]:
        return db.query(Branch).filter(Branch.id == branch_id).first()

    @staticmethod
    def get_shop_branch(db: Session, branch_id: int, shop_id: int) -> Optional[Branch]:
        return db.query(Branch).filter(Branch.id == branch_id, Branch.shop_id == shop_id).first()

    @staticmethod
    def get_shop(db: Session, shop_id: int) -> Optional[Shop]:
        return db.query(Shop).filter(Shop.id == shop_id).first()

    @staticmethod
    def name_taken(db: Session, shop_id: int, name: str, exclude_id: Optional[int] = None) -> bool:
        query = db.query(Branch.id).filter(
            Branch.shop_id == shop_id, func.lower(Branch.name) == name.lower()
        )
        if exclude_id is not None:
            query = query.filter(Branch.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def list_branches(
        db: Session,
        page: int,
        limit: int,
        shop_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> tuple[list[Branch], int]:
        """Paginated branch listing with optional shop filter and name/address search"""
        query = db.query(Branch)
        if shop_id is not None:
            query = query.filter(Branch.shop_id == shop_id)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Branch.name.ilike(pattern), Branch.address.ilike(pattern)))

        total = query.count()
        branches = (
            query.options(joinedload(Branch.shop))
            .order_by(Branch.created_at.desc(), Branch.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return branches, total

    @staticmethod
    def list_shop_branches(db: Session, shop_id: int, active_only: bool = False) -> list[Branch]:
        query = db.query(Branch).filter(Branch.shop_id == shop_id)
        if active_only:
            query = query.filter(Branch.is_active.is_(True))
        return query.order_by(Branch.id).all()

    @staticmethod
    def add_branch(db: Session, shop_id: int, **branch_data) -> Branch:
        """Stage a branch with its default methods and opening hours"""
        branch = Branch(shop_id=shop_id, **branch_data)
        db.add(branch)
        db.flush()

        for method in db.query(ShopMethod).all():
            db.add(
                BranchMethod(
                    branch_id=branch.id,
                    method_id=method.id,
                    is_enabled=method.code not in DISABLED_METHODS,
                )
            )

        for day in range(7):
            db.add(
                BranchOperatingHours(
                    branch_id=branch.id,
                    day_of_week=day,
                    open_time=DEFAULT_OPEN_TIME,
                    close_time=DEFAULT_CLOSE_TIME,
                    is_closed=day in CLOSED_DAYS,
                )
            )
        db.flush()
        return branch

    @staticmethod
    def update_branch(db: Session, branch: Branch, **updates) -> Branch:
        for key, value in updates.items():
            if value is not None and hasattr(branch, key):
                setattr(branch, key, value)
        db.commit()
        db.refresh(branch)
        return branch

    @staticmethod
    def has_open_orders(db: Session, branch_id: int) -> bool:
        return db.query(Order.id).filter(Order.branch_id == branch_id).first() is not None

    @staticmethod
    def delete_branch(db: Session, branch: Branch) -> None:
        """Services, overrides, hours, contacts, orders and assignments cascade in one commit"""
        db.delete(branch)
        db.commit()
