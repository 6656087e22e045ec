"""
Create (or promote) the platform superadmin
Usage: python create_superadmin.py <email> <full_name>
"""
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from laundrygo.database import Base, SessionLocal, engine
from laundrygo.domain.users.repository import UserRepository
from laundrygo.security_utils import generate_secure_password, hash_password_bcrypt
from laundrygo.seed import seed_reference_data
from laundrygo.shared.validators import validate_email

logging.basicConfig(level=logging.INFO, format='%(message)s')
logger = logging.getLogger(__name__)


def create_superadmin(db: Session, email: str, full_name: str) -> tuple:
    """Return (user, password); an existing account is promoted and gets a fresh password"""
    email = validate_email(email)
    password = generate_secure_password()
    repo = UserRepository()

    user = repo.get_user_by_email(db, email)
    if user:
        logger.info(f"Promoting existing user {email}")
        user.password_hash = hash_password_bcrypt(password)
        user.full_name = full_name or user.full_name
        user.is_active = True
    else:
        logger.info(f"Creating user {email}")
        user = repo.add_user(db, email=email, password_hash=hash_password_bcrypt(password), full_name=full_name)

    repo.grant_role(db, user, "superadmin")
    db.commit()
    db.refresh(user)
    return user, password


if __name__ == "__main__":
    if len(sys.argv) < 3:
        logger.error("Usage: python create_superadmin.py <email> <full_name>")
        sys.exit(1)

    Base.metadata.create_all(bind=engine, checkfirst=True)
    session = SessionLocal()
    try:
        seed_reference_data(session)
        admin, generated = create_superadmin(session, sys.argv[1], " ".join(sys.argv[2:]))
        logger.info(f"✅ Superadmin ready: {admin.email}")
        logger.info(f"Password: {generated}")
    except (SQLAlchemyError, ValueError) as e:
        session.rollback()
        logger.error(f"❌ Failed to create superadmin: {e}")
        sys.exit(1)
    finally:
        session.close()
