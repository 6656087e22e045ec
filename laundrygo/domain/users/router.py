"""User router - administrator account management"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...models import User
from .service import UserService

router = APIRouter(prefix="/admin/users", tags=["Admin"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Dependency injection for UserService"""
    return UserService(db)


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    request: Request,
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    """Delete a user together with their roles and shop assignments"""
    return service.delete_user(user_id, admin, request)
