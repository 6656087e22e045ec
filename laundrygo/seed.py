"""Reference data every deployment needs: roles and order methods"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import Role, ShopMethod

logger = logging.getLogger(__name__)

ROLE_NAMES = ("superadmin", "admin", "owner", "employee", "delivery", "customer")

ORDER_METHODS = {
    "dropoff": "Drop Off",
    "pickup": "Pick Up",
    "delivery": "Delivery",
    "self_service": "Self Service",
}


def seed_reference_data(db: Session) -> None:
    """Insert missing roles and methods; safe to run on every startup"""
    try:
        existing_roles = {name for (name,) in db.query(Role.name).all()}
        for name in ROLE_NAMES:
            if name not in existing_roles:
                db.add(Role(name=name))

        existing_methods = {code for (code,) in db.query(ShopMethod.code).all()}
        for code, label in ORDER_METHODS.items():
            if code not in existing_methods:
                db.add(ShopMethod(code=code, label=label))

        db.commit()
        logger.info("✅ Reference data ready")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Failed to seed reference data: {e}")
