import os

# Must be set before the application modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ.pop("REDIS_URL", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from laundrygo.database import Base, SessionLocal, engine  # noqa: E402
from laundrygo.domain.branches.repository import BranchRepository  # noqa: E402
from laundrygo.domain.catalog.repository import CatalogRepository  # noqa: E402
from laundrygo.domain.shops.repository import ShopRepository  # noqa: E402
from laundrygo.domain.users.repository import UserRepository  # noqa: E402
from laundrygo.main import app  # noqa: E402
from laundrygo.rate_limiter import reset_rate_limits  # noqa: E402
from laundrygo.security_utils import create_jwt_token, hash_password_bcrypt  # noqa: E402
from laundrygo.seed import seed_reference_data  # noqa: E402

DEFAULT_PASSWORD = "password123"


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    seed_reference_data(session)
    reset_rate_limits()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    return TestClient(app)


def auth_headers(user) -> dict:
    token = create_jwt_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(db):
    def _make_user(email, *roles, full_name="Test User", phone=None, password=DEFAULT_PASSWORD):
        repo = UserRepository()
        user = repo.add_user(
            db, email=email, password_hash=hash_password_bcrypt(password), full_name=full_name, phone=phone
        )
        for role in roles:
            repo.grant_role(db, user, role)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def admin(make_user):
    return make_user("admin@laundrygo.test", "superadmin", full_name="Site Admin")


@pytest.fixture
def make_shop(db, make_user):
    """Owner, shop, main branch with default services and the owner assignment"""

    def _make_shop(name="Bubbles Laundry", owner_email="owner@bubbles.test"):
        owner = make_user(owner_email, "owner", full_name=f"{name} Owner")
        shop = ShopRepository.add_shop(db, name=name, description="Neighbourhood laundry", owner_id=owner.id)
        branch = BranchRepository.add_branch(
            db, shop.id, name="Main Branch", address="1 Soap Street", latitude=14.6, longitude=121.0
        )
        UserRepository.add_assignment(db, owner, shop.id, "owner")
        CatalogRepository.add_default_services(db, branch.id)
        db.commit()
        db.refresh(owner)
        db.refresh(shop)
        db.refresh(branch)
        return owner, shop, branch

    return _make_shop


@pytest.fixture
def make_staff(db, make_user):
    def _make_staff(shop, branch, email, role="employee"):
        user = make_user(email, role, full_name=f"{role.title()} Person")
        UserRepository.add_assignment(db, user, shop.id, role, branch_id=branch.id)
        db.commit()
        db.refresh(user)
        return user

    return _make_staff
