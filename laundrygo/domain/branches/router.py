"""Branch router - admin and owner branch endpoints"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ...auth import OwnerContext, require_admin, require_owner
from ...database import get_db
from ...models import User
from .schemas import AdminBranchCreate, BranchCreate, BranchListResponse, BranchResponse, BranchUpdate
from .service import BranchService

admin_router = APIRouter(prefix="/admin/branches", tags=["Admin"])
owner_router = APIRouter(prefix="/owner/branches", tags=["Owner"])


def get_branch_service(db: Session = Depends(get_db)) -> BranchService:
    """Dependency injection for BranchService"""
    return BranchService(db)


# ============================================================================
# ADMIN
# ============================================================================


@admin_router.get("", response_model=BranchListResponse)
async def list_branches(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    shop_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    _: User = Depends(require_admin),
    service: BranchService = Depends(get_branch_service),
):
    """List branches across all shops, paginated"""
    return service.list_branches(page, limit, shop_id, search)


@admin_router.post("", response_model=BranchResponse, status_code=201)
async def create_branch(
    data: AdminBranchCreate,
    request: Request,
    admin: User = Depends(require_admin),
    service: BranchService = Depends(get_branch_service),
):
    return service.admin_create_branch(data, admin, request)


@admin_router.put("/{branch_id}", response_model=BranchResponse)
async def update_branch(
    branch_id: int,
    data: BranchUpdate,
    request: Request,
    admin: User = Depends(require_admin),
    service: BranchService = Depends(get_branch_service),
):
    return service.admin_update_branch(branch_id, data, admin, request)


@admin_router.delete("/{branch_id}")
async def delete_branch(
    branch_id: int,
    request: Request,
    admin: User = Depends(require_admin),
    service: BranchService = Depends(get_branch_service),
):
    """Delete a branch and everything attached to it"""
    return service.admin_delete_branch(branch_id, admin, request)


# ============================================================================
# OWNER
# ============================================================================


@owner_router.get("", response_model=list[BranchResponse])
async def owner_list_branches(
    owner: OwnerContext = Depends(require_owner),
    service: BranchService = Depends(get_branch_service),
):
    return service.owner_list_branches(owner)


@owner_router.post("", response_model=BranchResponse, status_code=201)
async def owner_create_branch(
    data: BranchCreate,
    owner: OwnerContext = Depends(require_owner),
    service: BranchService = Depends(get_branch_service),
):
    """Open a new branch with default methods and opening hours"""
    return service.owner_create_branch(owner, data)


@owner_router.put("/{branch_id}", response_model=BranchResponse)
async def owner_update_branch(
    branch_id: int,
    data: BranchUpdate,
    owner: OwnerContext = Depends(require_owner),
    service: BranchService = Depends(get_branch_service),
):
    return service.owner_update_branch(owner, branch_id, data)


@owner_router.delete("/{branch_id}")
async def owner_delete_branch(
    branch_id: int,
    owner: OwnerContext = Depends(require_owner),
    service: BranchService = Depends(get_branch_service),
):
    """Delete a branch; refused while it still has working orders"""
    return service.owner_delete_branch(owner, branch_id)
