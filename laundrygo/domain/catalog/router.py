"""Catalog router - owner services, order methods, detergents and softeners"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import OwnerContext, require_owner
from ...database import get_db
from .schemas import (
    AddonOverrideUpdate,
    AddonResponse,
    AddonTypeCreate,
    BranchAddonsResponse,
    BranchServicesResponse,
    MethodToggle,
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
)
from .service import CatalogService

router = APIRouter(prefix="/owner", tags=["Owner"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db)


# ============================================================================
# SERVICES
# ============================================================================


@router.get("/services", response_model=BranchServicesResponse)
async def get_services(
    branch_id: Optional[int] = Query(None),
    owner: OwnerContext = Depends(require_owner),
    service: CatalogService = Depends(get_catalog_service),
):
    """Active services and enabled methods for a branch (defaults to the first active one)"""
    return service.get_services(owner, branch_id)


@router.post("/services", response_model=ServiceResponse, status_code=201)
async def create_service(
    data: ServiceCreate,
    owner: OwnerContext = Depends(require_owner),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.create_service(owner, data)


@router.put("/services/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: int,
    data: ServiceUpdate,
    owner: OwnerContext = Depends(require_owner),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.update_service(owner, service_id, data)


@router.delete("/services/{service_id}")
async def delete_service(
    service_id: int,
    owner: OwnerContext = Depends(require_owner),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.delete_service(owner, service_id)


@router.patch("/methods")
async def toggle_method(
    data: MethodToggle,
    owner: OwnerContext = Depends(require_owner),
    service: CatalogService = Depends(get_catalog_service),
):
    """Enable or disable an order method (dropoff, delivery, pickup, self_service) for a branch"""
    return service.toggle_method(owner, data)


# ============================================================================
# DETERGENTS & SOFTENERS
# ============================================================================


@router.get("/detergents", response_model=BranchAddonsResponse)
async def list_detergents(
    branch_id: Optional[int] = Query(None),
    owner: OwnerContext = Depends(require_owner),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.list_addons(owner, branch_id)


@router.patch("/detergents", response_model=AddonResponse)
async def update_detergent(
    data: AddonOverrideUpdate,
    owner: OwnerContext = Depends(require_owner),
    service: CatalogService = Depends(get_catalog_service),
):
    """Set availability, custom price or display order of a detergent/softener at a branch"""
    return service.update_addon(owner, data)


@router.post("/detergents", response_model=AddonResponse, status_code=201)
async def create_detergent(
    data: AddonTypeCreate,
    owner: OwnerContext = Depends(require_owner),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.create_addon(owner, data)
