import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .models import Shop, ShopUserAssignment, User
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ADMIN_ROLES = ("superadmin", "admin")

# Highest privilege first; the first match decides the dashboard
ROLE_PRIORITY = ("superadmin", "admin", "owner", "employee", "delivery", "customer")

ROLE_REDIRECTS = {
    "superadmin": "/admin",
    "admin": "/admin",
    "owner": "/owner",
    "employee": "/employee",
    "delivery": "/delivery",
    "customer": "/customer",
}


@dataclass
class OwnerContext:
    user: User
    shop: Shop


def get_primary_role(user: User) -> Optional[str]:
    """Resolve the role that decides where a user lands after login"""
    names = set(user.role_names)
    for role in ROLE_PRIORITY:
        if role in names:
            return role
    return None


def has_role(user: User, *roles: str) -> bool:
    return any(name in roles for name in user.role_names)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current user from the bearer access token"""

    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    token = credentials.credentials

    # Basic token format validation before processing
    token_parts = token.split(".")
    if len(token_parts) != 3:
        logger.warning(f"⚠️ Malformed token received: {len(token_parts)} parts, token length: {len(token)}")
        raise HTTPException(
            status_code=401, detail="Invalid token format. Expected a valid JWT token."
        )

    payload = verify_jwt_token(token)
    if not payload or not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=401, detail="Invalid token claims") from e

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        logger.warning(f"⚠️ Token for missing or inactive user {user_id}")
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    logger.debug(f"✅ User authenticated: {user.email}")
    return user


def require_role(*roles: str):
    """Dependency factory: the current user must hold one of the given roles"""

    async def dependency(user: User = Depends(get_current_user)) -> User:
        if not has_role(user, *roles):
            logger.warning(f"🚫 {user.email} lacks role {roles}")
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return dependency


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not has_role(user, *ADMIN_ROLES):
        logger.warning(f"🚫 Admin access denied for {user.email}")
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


async def require_owner(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> OwnerContext:
    """The current user must own a shop through an active owner assignment"""
    assignment = (
        db.query(ShopUserAssignment)
        .filter(
            ShopUserAssignment.user_id == user.id,
            ShopUserAssignment.role_in_shop == "owner",
            ShopUserAssignment.is_active.is_(True),
        )
        .first()
    )
    if not assignment or not assignment.shop:
        logger.warning(f"🚫 Owner access denied for {user.email}")
        raise HTTPException(status_code=403, detail="Owner access required")

    return OwnerContext(user=user, shop=assignment.shop)


def get_staff_assignments(db: Session, user: User, role_in_shop: str) -> list[ShopUserAssignment]:
    return (
        db.query(ShopUserAssignment)
        .filter(
            ShopUserAssignment.user_id == user.id,
            ShopUserAssignment.role_in_shop == role_in_shop,
            ShopUserAssignment.is_active.is_(True),
            ShopUserAssignment.branch_id.isnot(None),
        )
        .order_by(ShopUserAssignment.id)
        .all()
    )


def ensure_branch_assignment(
    db: Session, user: User, branch_id: int, role_in_shop: str = "employee"
) -> ShopUserAssignment:
    """Raise 403 unless the user is actively assigned to the branch in the given role"""
    assignment = (
        db.query(ShopUserAssignment)
        .filter(
            ShopUserAssignment.user_id == user.id,
            ShopUserAssignment.branch_id == branch_id,
            ShopUserAssignment.role_in_shop == role_in_shop,
            ShopUserAssignment.is_active.is_(True),
        )
        .first()
    )
    if not assignment:
        logger.warning(f"🚫 {user.email} is not an active {role_in_shop} of branch {branch_id}")
        raise HTTPException(status_code=403, detail="Not assigned to this branch")
    return assignment
