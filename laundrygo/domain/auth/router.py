"""Auth router - login, logout, registration and per-dashboard access checks"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import OwnerContext, get_current_user, require_admin, require_owner
from ...database import get_db
from ...models import User
from ...rate_limiter import create_rate_limiter
from .schemas import LoginRequest, LoginResponse, MeResponse, RegisterRequest
from .service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])
check_router = APIRouter(tags=["Auth"])

login_rate_limit = create_rate_limiter(limit=10, window_seconds=300, key_prefix="login")
register_rate_limit = create_rate_limiter(limit=5, window_seconds=3600, key_prefix="register")


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    """Dependency injection for AuthService"""
    return AuthService(db)


@router.post("/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    _: None = Depends(login_rate_limit),
    service: AuthService = Depends(get_auth_service),
):
    """Exchange email and password for an access token and the dashboard to open"""
    return service.login(data)


@router.post("/logout")
async def logout(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    return service.logout(current_user)


@router.post("/register", status_code=201)
async def register(
    data: RegisterRequest,
    _: None = Depends(register_rate_limit),
    service: AuthService = Depends(get_auth_service),
):
    """Customer self sign-up"""
    return service.register_customer(data)


@router.get("/me", response_model=MeResponse)
async def me(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    return service.describe(current_user)


# ============================================================================
# DASHBOARD ACCESS CHECKS
# ============================================================================


@check_router.get("/admin/check-auth")
async def check_admin(admin: User = Depends(require_admin)):
    return {"authorized": True, "user": {"id": admin.id, "email": admin.email}}


@check_router.get("/owner/check-auth")
async def check_owner(owner: OwnerContext = Depends(require_owner)):
    return {
        "authorized": True,
        "user": {"id": owner.user.id, "email": owner.user.email},
        "shop": {"id": owner.shop.id, "name": owner.shop.name},
    }


@check_router.get("/employee/check-auth")
async def check_employee(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    branches = service.employee_branches(current_user)
    return {
        "authorized": True,
        "user": {"id": current_user.id, "email": current_user.email},
        "branches": branches,
    }
