"""User repository - Database operations for accounts and roles"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Role, ShopUserAssignment, User, UserRole


class UserRepository:
    """Repository for user database operations"""

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

    @staticmethod
    def email_exists(db: Session, email: str, exclude_user_id: Optional[int] = None) -> bool:
        query = db.query(User.id).filter(func.lower(User.email) == email.strip().lower())
        if exclude_user_id is not None:
            query = query.filter(User.id != exclude_user_id)
        return query.first() is not None

    @staticmethod
    def add_user(
        db: Session,
        email: str,
        password_hash: str,
        full_name: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> User:
        """Stage a new user; the caller owns the transaction"""
        user = User(
            email=email.strip().lower(),
            password_hash=password_hash,
            full_name=full_name,
            phone=phone,
        )
        db.add(user)
        db.flush()
        return user

    @staticmethod
    def get_role(db: Session, name: str) -> Role:
        role = db.query(Role).filter(Role.name == name).first()
        if not role:
            role = Role(name=name)
            db.add(role)
            db.flush()
        return role

    @classmethod
    def grant_role(cls, db: Session, user: User, role_name: str) -> None:
        """Give the user a role unless they already hold it"""
        role = cls.get_role(db, role_name)
        exists = (
            db.query(UserRole.id)
            .filter(UserRole.user_id == user.id, UserRole.role_id == role.id)
            .first()
        )
        if not exists:
            db.add(UserRole(user_id=user.id, role_id=role.id))
            db.flush()

    @staticmethod
    def revoke_role(db: Session, user: User, role_name: str) -> None:
        role = db.query(Role).filter(Role.name == role_name).first()
        if role:
            db.query(UserRole).filter(
                UserRole.user_id == user.id, UserRole.role_id == role.id
            ).delete(synchronize_session="fetch")

    @staticmethod
    def add_assignment(
        db: Session,
        user: User,
        shop_id: int,
        role_in_shop: str,
        branch_id: Optional[int] = None,
    ) -> ShopUserAssignment:
        assignment = ShopUserAssignment(
            user_id=user.id,
            shop_id=shop_id,
            branch_id=branch_id,
            role_in_shop=role_in_shop,
            is_active=True,
        )
        db.add(assignment)
        db.flush()
        return assignment

    @staticmethod
    def delete_user(db: Session, user: User) -> None:
        """Roles and assignments go with the user through FK cascades"""
        db.delete(user)
        db.commit()
