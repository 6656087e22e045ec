"""Auth service - credential checks, token issuing and self registration"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...activity_logger import log_activity
from ...auth import ROLE_REDIRECTS, get_primary_role, get_staff_assignments
from ...models import ShopUserAssignment, User
from ...security_utils import create_jwt_token, hash_password_bcrypt, verify_password_bcrypt
from ..users.repository import UserRepository
from .schemas import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository()

    def _shop_id_for(self, user: User):
        assignment = (
            self.db.query(ShopUserAssignment)
            .filter(ShopUserAssignment.user_id == user.id, ShopUserAssignment.is_active.is_(True))
            .first()
        )
        return assignment.shop_id if assignment else None

    def login(self, data: LoginRequest) -> dict:
        user = self.users.get_user_by_email(self.db, data.email)

        if not user or not user.is_active or not verify_password_bcrypt(data.password, user.password_hash):
            logger.warning(f"⚠️ Failed login for {data.email}")
            log_activity(
                self.db,
                action="login_failed",
                entity_type="user",
                actor_type="unknown",
                actor_name=data.email,
                entity_id=user.id if user else None,
                entity_name=data.email,
                description=f"Failed login attempt for {data.email}",
                severity="warning",
                shop_id=self._shop_id_for(user) if user else None,
            )
            raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

        role = get_primary_role(user)
        if role is None:
            logger.warning(f"⚠️ Login for {user.email} rejected: no role assigned")
            raise HTTPException(status_code=403, detail="No role assigned to this account")

        token = create_jwt_token({"sub": str(user.id), "role": role})
        summary = {
            "id": user.id,
            "email": user.email,
            "full_name": user.full_name,
            "roles": user.role_names,
        }

        logger.info(f"✅ Login: {user.email} as {role}")
        log_activity(
            self.db,
            action="login_success",
            entity_type="user",
            actor=user,
            actor_type=role,
            entity_id=user.id,
            entity_name=user.email,
            description=f"{summary['full_name'] or summary['email']} logged in",
            shop_id=self._shop_id_for(user),
        )

        return {
            "accessToken": token,
            "tokenType": "bearer",
            "role": role,
            "redirectTo": ROLE_REDIRECTS[role],
            "user": summary,
        }

    def logout(self, user: User) -> dict:
        log_activity(
            self.db,
            action="logout",
            entity_type="user",
            actor=user,
            actor_type=get_primary_role(user) or "unknown",
            entity_id=user.id,
            entity_name=user.email,
            description=f"{user.full_name or user.email} logged out",
            shop_id=self._shop_id_for(user),
        )
        return {"message": "Logged out successfully"}

    def register_customer(self, data: RegisterRequest) -> dict:
        if self.users.email_exists(self.db, data.email):
            raise HTTPException(status_code=409, detail="Email already registered")

        try:
            user = self.users.add_user(
                self.db,
                email=data.email,
                password_hash=hash_password_bcrypt(data.password),
                full_name=data.full_name.strip(),
                phone=data.phone,
            )
            self.users.grant_role(self.db, user, "customer")
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(status_code=409, detail="Email already registered") from e

        logger.info(f"✅ Customer registered: {user.email}")
        return {
            "message": "Account created successfully",
            "user": {"id": user.id, "email": user.email, "full_name": user.full_name, "roles": ["customer"]},
        }

    def describe(self, user: User) -> dict:
        return {
            "id": user.id,
            "email": user.email,
            "full_name": user.full_name,
            "phone": user.phone,
            "roles": user.role_names,
            "role": get_primary_role(user),
            "assignments": [
                {"shop_id": a.shop_id, "branch_id": a.branch_id, "role_in_shop": a.role_in_shop}
                for a in user.assignments
                if a.is_active
            ],
        }

    def employee_branches(self, user: User) -> list[dict]:
        assignments = get_staff_assignments(self.db, user, "employee")
        if not assignments:
            raise HTTPException(status_code=403, detail="Employee access required")
        return [
            {"id": a.branch.id, "name": a.branch.name, "shop_id": a.shop_id, "shop_name": a.shop.name}
            for a in assignments
        ]
