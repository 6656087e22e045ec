"""Catalog repository - services, order methods, detergents and softeners per branch"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import (
    BranchDetergent,
    BranchMethod,
    BranchSoftener,
    DetergentType,
    ShopMethod,
    ShopService,
    SoftenerType,
)

DEFAULT_SERVICES = (
    ("Wash & Fold", 60.0, "Washed, dried and neatly folded"),
    ("Wash & Iron", 80.0, "Washed, dried and pressed"),
    ("Dry Clean", 120.0, "Solvent cleaning for delicate fabrics"),
)

# kind -> (type model, branch override model, override foreign key)
ADDON_KINDS = {
    "detergent": (DetergentType, BranchDetergent, "detergent_id"),
    "softener": (SoftenerType, BranchSoftener, "softener_id"),
}


def final_price(override) -> float:
    """Branch price for an add-on: the custom price when set, else the type's base price"""
    if override.custom_price is not None:
        return override.custom_price
    return override.item.base_price


class CatalogRepository:
    """Repository for catalog database operations"""

    # ========================================================================
    # SERVICES
    # ========================================================================

    @staticmethod
    def add_default_services(db: Session, branch_id: int) -> None:
        for name, price, description in DEFAULT_SERVICES:
            db.add(
                ShopService(branch_id=branch_id, name=name, price_per_kg=price, description=description)
            )
        db.flush()

    @staticmethod
    def list_active_services(db: Session, branch_id: int) -> list[ShopService]:
        return (
            db.query(ShopService)
            .filter(ShopService.branch_id == branch_id, ShopService.is_active.is_(True))
            .order_by(ShopService.id)
            .all()
        )

    @staticmethod
    def get_service(db: Session, service_id: int) -> Optional[ShopService]:
        return db.query(ShopService).filter(ShopService.id == service_id).first()

    @staticmethod
    def service_name_taken(
        db: Session, branch_id: int, name: str, exclude_id: Optional[int] = None
    ) -> bool:
        query = db.query(ShopService.id).filter(
            ShopService.branch_id == branch_id,
            ShopService.is_active.is_(True),
            func.lower(ShopService.name) == name.lower(),
        )
        if exclude_id is not None:
            query = query.filter(ShopService.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def create_service(db: Session, **service_data) -> ShopService:
        service = ShopService(**service_data)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def update_service(db: Session, service: ShopService, **updates) -> ShopService:
        for key, value in updates.items():
            if value is not None and hasattr(service, key):
                setattr(service, key, value)
        db.commit()
        db.refresh(service)
        return service

    # ========================================================================
    # ORDER METHODS
    # ========================================================================

    @staticmethod
    def get_method_by_code(db: Session, code: str) -> Optional[ShopMethod]:
        return db.query(ShopMethod).filter(ShopMethod.code == code).first()

    @staticmethod
    def get_branch_methods(db: Session, branch_id: int) -> list[BranchMethod]:
        return db.query(BranchMethod).filter(BranchMethod.branch_id == branch_id).all()

    @staticmethod
    def set_branch_method(db: Session, branch_id: int, method: ShopMethod, enabled: bool) -> BranchMethod:
        branch_method = (
            db.query(BranchMethod)
            .filter(BranchMethod.branch_id == branch_id, BranchMethod.method_id == method.id)
            .first()
        )
        if branch_method is None:
            branch_method = BranchMethod(branch_id=branch_id, method_id=method.id)
            db.add(branch_method)
        branch_method.is_enabled = enabled
        db.commit()
        db.refresh(branch_method)
        return branch_method

    # ========================================================================
    # DETERGENTS & SOFTENERS
    # ========================================================================

    @staticmethod
    def list_types(db: Session, kind: str) -> list:
        type_model = ADDON_KINDS[kind][0]
        return db.query(type_model).order_by(type_model.name).all()

    @staticmethod
    def get_type(db: Session, kind: str, item_id: int):
        type_model = ADDON_KINDS[kind][0]
        return db.query(type_model).filter(type_model.id == item_id).first()

    @staticmethod
    def type_name_taken(db: Session, kind: str, name: str) -> bool:
        type_model = ADDON_KINDS[kind][0]
        return db.query(type_model.id).filter(func.lower(type_model.name) == name.lower()).first() is not None

    @staticmethod
    def add_type(db: Session, kind: str, **type_data):
        item = ADDON_KINDS[kind][0](**type_data)
        db.add(item)
        db.flush()
        return item

    @staticmethod
    def list_overrides(db: Session, kind: str, branch_id: int, available_only: bool = False) -> list:
        _, override_model, _ = ADDON_KINDS[kind]
        query = db.query(override_model).filter(override_model.branch_id == branch_id)
        if available_only:
            query = query.filter(override_model.is_available.is_(True))
        return query.order_by(override_model.display_order, override_model.id).all()

    @staticmethod
    def get_override(db: Session, kind: str, branch_id: int, item_id: int):
        _, override_model, item_column = ADDON_KINDS[kind]
        return (
            db.query(override_model)
            .filter(
                override_model.branch_id == branch_id,
                getattr(override_model, item_column) == item_id,
            )
            .first()
        )

    @classmethod
    def upsert_override(cls, db: Session, kind: str, branch_id: int, item_id: int, **values):
        """
        Create or update the branch's pricing row for a detergent or softener; caller commits.

        Every given value is written, so ``custom_price=None`` falls back to the base price.
        """
        _, override_model, item_column = ADDON_KINDS[kind]
        override = cls.get_override(db, kind, branch_id, item_id)
        if override is None:
            override = override_model(branch_id=branch_id, **{item_column: item_id})
            override.is_available = True
            override.display_order = 0
            db.add(override)

        for key, value in values.items():
            setattr(override, key, value)
        db.flush()
        return override
