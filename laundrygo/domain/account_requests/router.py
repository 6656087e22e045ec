"""Account request router - public application form and admin review"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...models import User
from ...rate_limiter import create_rate_limiter
from .schemas import AccountRequestCreate, AccountRequestResponse, AccountRequestReview
from .service import AccountRequestService

public_router = APIRouter(prefix="/account-requests", tags=["Account Requests"])
admin_router = APIRouter(prefix="/admin/account-requests", tags=["Admin"])

submission_rate_limit = create_rate_limiter(limit=5, window_seconds=3600, key_prefix="account_request")


def get_account_request_service(db: Session = Depends(get_db)) -> AccountRequestService:
    """Dependency injection for AccountRequestService"""
    return AccountRequestService(db)


@public_router.post("", status_code=201)
async def submit_account_request(
    data: AccountRequestCreate,
    _: None = Depends(submission_rate_limit),
    service: AccountRequestService = Depends(get_account_request_service),
):
    """Apply for a shop owner account"""
    return service.submit_request(data)


# ============================================================================
# ADMIN REVIEW
# ============================================================================


@admin_router.get("", response_model=list[AccountRequestResponse])
async def list_account_requests(
    status: Optional[str] = Query("pending"),
    _: User = Depends(require_admin),
    service: AccountRequestService = Depends(get_account_request_service),
):
    """List requests by status; 'all' disables the filter"""
    return service.list_requests(status)


@admin_router.get("/{request_id}", response_model=AccountRequestResponse)
async def get_account_request(
    request_id: int,
    _: User = Depends(require_admin),
    service: AccountRequestService = Depends(get_account_request_service),
):
    return service.get_request(request_id)


@admin_router.put("/{request_id}")
async def review_account_request(
    request_id: int,
    data: AccountRequestReview,
    request: Request,
    admin: User = Depends(require_admin),
    service: AccountRequestService = Depends(get_account_request_service),
):
    """Approve (provisions the owner account and shop) or reject a pending request"""
    return service.review_request(request_id, data.action, admin, request)


@admin_router.delete("/{request_id}")
async def delete_account_request(
    request_id: int,
    request: Request,
    admin: User = Depends(require_admin),
    service: AccountRequestService = Depends(get_account_request_service),
):
    return service.delete_request(request_id, admin, request)
