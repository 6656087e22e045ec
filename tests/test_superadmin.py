import pytest

from create_superadmin import create_superadmin
from laundrygo.security_utils import verify_password_bcrypt


def test_creates_superadmin(client, db):
    user, password = create_superadmin(db, "Root@LaundryGo.test", "Root Admin")

    assert user.email == "root@laundrygo.test"
    assert user.role_names == ["superadmin"]
    assert verify_password_bcrypt(password, user.password_hash)

    login = client.post("/auth/login", json={"email": "root@laundrygo.test", "password": password})
    assert login.status_code == 200
    assert login.json()["redirectTo"] == "/admin"


def test_promotes_existing_user(db, make_user):
    existing = make_user("cora@example.com", "customer", full_name="Cora")

    user, password = create_superadmin(db, "cora@example.com", "")

    assert user.id == existing.id
    assert user.full_name == "Cora"
    assert sorted(user.role_names) == ["customer", "superadmin"]
    assert verify_password_bcrypt(password, user.password_hash)


def test_rejects_invalid_email(db):
    with pytest.raises(ValueError):
        create_superadmin(db, "not-an-email", "Nobody")
