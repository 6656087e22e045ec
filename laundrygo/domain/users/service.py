"""User service - account deletion for administrators"""

import logging

from fastapi import HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...activity_logger import log_admin_action
from ...models import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    def delete_user(self, user_id: int, admin: User, request: Request) -> dict:
        if user_id == admin.id:
            raise HTTPException(status_code=400, detail="You cannot delete your own account")

        user = self.repo.get_user_by_id(self.db, user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        email = user.email
        try:
            self.repo.delete_user(self.db, user)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to delete user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete user") from e

        logger.info(f"✅ User deleted: {email}")
        log_admin_action(
            self.db, admin, "delete_user", "user", user_id, email, f"Deleted user {email}", request
        )
        return {"message": "User deleted successfully"}
