"""Catalog service - what a branch sells and at which price"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...activity_logger import log_activity
from ...auth import OwnerContext
from ...models import Branch, ShopService
from ...seed import ORDER_METHODS
from ..branches.service import BranchService
from .repository import ADDON_KINDS, CatalogRepository, final_price
from .schemas import AddonOverrideUpdate, AddonTypeCreate, MethodToggle, ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)


def serialize_service(service: ShopService) -> dict:
    return {
        "id": service.id,
        "name": service.name,
        "price": service.price_per_kg,
        "description": service.description,
    }


def serialize_addon(override) -> dict:
    return {
        "id": override.item.id,
        "name": override.item.name,
        "description": override.item.description,
        "base_price": override.item.base_price,
        "custom_price": override.custom_price,
        "is_available": override.is_available,
        "display_order": override.display_order,
        "final_price": final_price(override),
    }


def build_branch_catalog(db: Session, branch: Branch, exclude_methods: tuple = ()) -> dict:
    """Active services, available add-ons and enabled methods of one branch"""
    repo = CatalogRepository()
    methods = [
        {"code": bm.method.code, "label": bm.method.label}
        for bm in repo.get_branch_methods(db, branch.id)
        if bm.is_enabled and bm.method.code not in exclude_methods
    ]
    return {
        "branch": {"id": branch.id, "name": branch.name, "address": branch.address, "shop_id": branch.shop_id},
        "services": [serialize_service(s) for s in repo.list_active_services(db, branch.id)],
        "detergents": [
            serialize_addon(o) for o in repo.list_overrides(db, "detergent", branch.id, available_only=True)
        ],
        "softeners": [
            serialize_addon(o) for o in repo.list_overrides(db, "softener", branch.id, available_only=True)
        ],
        "methods": sorted(methods, key=lambda m: m["code"]),
    }


class CatalogService:
    """Service layer for the owner's catalog pages"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CatalogRepository()
        self.branches = BranchService(db)

    def resolve_branch(self, owner: OwnerContext, branch_id: Optional[int]) -> Branch:
        return self.branches.resolve_owner_branch(owner, branch_id)

    def _owned_service(self, owner: OwnerContext, service_id: int) -> ShopService:
        service = self.repo.get_service(self.db, service_id)
        if not service or service.branch.shop_id != owner.shop.id or not service.is_active:
            raise HTTPException(status_code=404, detail="Service not found")
        return service

    def _log(self, owner: OwnerContext, action: str, entity_type: str, entity_id, entity_name, description, branch_id):
        log_activity(
            self.db,
            action=action,
            entity_type=entity_type,
            actor=owner.user,
            actor_type="owner",
            entity_id=entity_id,
            entity_name=entity_name,
            description=description,
            shop_id=owner.shop.id,
            branch_id=branch_id,
        )

    # ========================================================================
    # SERVICES & METHODS
    # ========================================================================

    def get_services(self, owner: OwnerContext, branch_id: Optional[int]) -> dict:
        branch = self.resolve_branch(owner, branch_id)

        methods = {f"{code}_enabled": False for code in ORDER_METHODS}
        for branch_method in self.repo.get_branch_methods(self.db, branch.id):
            methods[f"{branch_method.method.code}_enabled"] = branch_method.is_enabled

        return {
            "branch_id": branch.id,
            "methods": methods,
            "services": [serialize_service(s) for s in self.repo.list_active_services(self.db, branch.id)],
        }

    def create_service(self, owner: OwnerContext, data: ServiceCreate) -> dict:
        branch = self.resolve_branch(owner, data.branch_id)
        if self.repo.service_name_taken(self.db, branch.id, data.name):
            raise HTTPException(status_code=409, detail="A service with this name already exists")

        try:
            service = self.repo.create_service(
                self.db,
                branch_id=branch.id,
                name=data.name,
                price_per_kg=data.price,
                description=data.description,
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create service {data.name} at branch {branch.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create service") from e

        result = serialize_service(service)
        logger.info(f"✅ Service created: {service.name} (branch {branch.id})")
        self._log(owner, "create_service", "service", service.id, service.name,
                  f"Added service {service.name} at {data.price:.2f}/kg", branch.id)
        return result

    def update_service(self, owner: OwnerContext, service_id: int, data: ServiceUpdate) -> dict:
        service = self._owned_service(owner, service_id)
        if data.name is not None and self.repo.service_name_taken(
            self.db, service.branch_id, data.name, exclude_id=service.id
        ):
            raise HTTPException(status_code=409, detail="A service with this name already exists")

        try:
            service = self.repo.update_service(
                self.db, service, name=data.name, price_per_kg=data.price, description=data.description
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update service {service_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update service") from e

        result = serialize_service(service)
        self._log(owner, "update_service", "service", service.id, service.name,
                  f"Updated service {service.name}", service.branch_id)
        return result

    def delete_service(self, owner: OwnerContext, service_id: int) -> dict:
        """Soft delete so that orders referencing the service keep their history"""
        service = self._owned_service(owner, service_id)
        service = self.repo.update_service(self.db, service, is_active=False)
        self._log(owner, "delete_service", "service", service.id, service.name,
                  f"Removed service {service.name}", service.branch_id)
        return {"message": "Service deleted successfully"}

    def toggle_method(self, owner: OwnerContext, data: MethodToggle) -> dict:
        branch = self.resolve_branch(owner, data.branch_id)
        method = self.repo.get_method_by_code(self.db, data.method)
        if not method:
            raise HTTPException(status_code=400, detail=f"Unknown method: {data.method}")

        branch_method = self.repo.set_branch_method(self.db, branch.id, method, data.enabled)
        state = "enabled" if branch_method.is_enabled else "disabled"
        self._log(owner, "toggle_method", "method", method.id, method.label,
                  f"{method.label} {state}", branch.id)
        return {"branch_id": branch.id, "method": method.code, "enabled": branch_method.is_enabled}

    # ========================================================================
    # DETERGENTS & SOFTENERS
    # ========================================================================

    def _addon_listing(self, kind: str, branch_id: int) -> list[dict]:
        """Every known type, merged with this branch's override where one exists"""
        overrides = {
            getattr(o, ADDON_KINDS[kind][2]): o for o in self.repo.list_overrides(self.db, kind, branch_id)
        }
        rows = []
        for item in self.repo.list_types(self.db, kind):
            override = overrides.get(item.id)
            custom_price = override.custom_price if override else None
            rows.append(
                {
                    "id": item.id,
                    "name": item.name,
                    "description": item.description,
                    "base_price": item.base_price,
                    "custom_price": custom_price,
                    "is_available": override.is_available if override else False,
                    "display_order": override.display_order if override else 0,
                    "final_price": custom_price if custom_price is not None else item.base_price,
                }
            )
        return sorted(rows, key=lambda r: (r["display_order"], r["name"].lower()))

    def list_addons(self, owner: OwnerContext, branch_id: Optional[int]) -> dict:
        branch = self.resolve_branch(owner, branch_id)
        return {
            "branch_id": branch.id,
            "detergents": self._addon_listing("detergent", branch.id),
            "softeners": self._addon_listing("softener", branch.id),
        }

    def update_addon(self, owner: OwnerContext, data: AddonOverrideUpdate) -> dict:
        branch = self.resolve_branch(owner, data.branch_id)
        item = self.repo.get_type(self.db, data.type, data.item_id)
        if not item:
            raise HTTPException(status_code=404, detail=f"{data.type.capitalize()} not found")

        # Only fields the owner sent; an explicit null custom_price clears the override
        changes = data.model_dump(exclude_unset=True, include={"is_available", "custom_price", "display_order"})
        changes = {k: v for k, v in changes.items() if v is not None or k == "custom_price"}

        override = self.repo.upsert_override(self.db, data.type, branch.id, item.id, **changes)
        self.db.commit()
        self.db.refresh(override)
        result = serialize_addon(override)
        self._log(owner, f"update_{data.type}", data.type, item.id, item.name,
                  f"Updated {data.type} {item.name} pricing", branch.id)
        return result

    def create_addon(self, owner: OwnerContext, data: AddonTypeCreate) -> dict:
        """Create a new detergent/softener type and offer it at the branch right away"""
        branch = self.resolve_branch(owner, data.branch_id)
        if self.repo.type_name_taken(self.db, data.type, data.name):
            raise HTTPException(status_code=409, detail=f"A {data.type} with this name already exists")

        try:
            item = self.repo.add_type(
                self.db, data.type, name=data.name, base_price=data.base_price, description=data.description
            )
            override = self.repo.upsert_override(
                self.db, data.type, branch.id, item.id, is_available=True, custom_price=data.base_price
            )
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(status_code=409, detail=f"A {data.type} with this name already exists") from e

        self.db.refresh(override)
        result = serialize_addon(override)
        self._log(owner, f"create_{data.type}", data.type, item.id, item.name,
                  f"Added {data.type} {item.name}", branch.id)
        return result
