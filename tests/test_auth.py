from conftest import DEFAULT_PASSWORD, auth_headers

from laundrygo.models import ActivityLog


def test_login_returns_token_and_dashboard(client, admin):
    response = client.post("/auth/login", json={"email": "ADMIN@laundrygo.test", "password": DEFAULT_PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "superadmin"
    assert body["redirectTo"] == "/admin"
    assert body["tokenType"] == "bearer"
    assert body["user"]["email"] == "admin@laundrygo.test"

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['accessToken']}"})
    assert me.status_code == 200
    assert me.json()["role"] == "superadmin"


def test_login_with_wrong_password_is_logged(client, db, admin):
    response = client.post("/auth/login", json={"email": admin.email, "password": "wrong-password"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"
    failed = db.query(ActivityLog).filter(ActivityLog.action == "login_failed").all()
    assert len(failed) == 1
    assert failed[0].severity == "warning"


def test_login_unknown_email_matches_wrong_password(client):
    response = client.post("/auth/login", json={"email": "nobody@laundrygo.test", "password": "whatever1"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


def test_login_without_role_is_forbidden(client, make_user):
    make_user("norole@laundrygo.test")
    response = client.post("/auth/login", json={"email": "norole@laundrygo.test", "password": DEFAULT_PASSWORD})
    assert response.status_code == 403


def test_role_priority_picks_highest(client, make_user):
    make_user("both@laundrygo.test", "customer", "owner")
    response = client.post("/auth/login", json={"email": "both@laundrygo.test", "password": DEFAULT_PASSWORD})
    assert response.json()["role"] == "owner"
    assert response.json()["redirectTo"] == "/owner"


def test_register_customer(client):
    payload = {"full_name": "Carla Customer", "email": "carla@example.com", "password": "longenough"}
    response = client.post("/auth/register", json=payload)

    assert response.status_code == 201
    assert response.json()["user"]["roles"] == ["customer"]

    duplicate = client.post("/auth/register", json=payload)
    assert duplicate.status_code == 409

    login = client.post("/auth/login", json={"email": "carla@example.com", "password": "longenough"})
    assert login.json()["redirectTo"] == "/customer"


def test_register_rejects_short_password(client):
    response = client.post(
        "/auth/register", json={"full_name": "Short", "email": "short@example.com", "password": "abc"}
    )
    assert response.status_code == 422


def test_missing_and_malformed_tokens(client):
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401


def test_inactive_user_token_rejected(client, db, admin):
    headers = auth_headers(admin)
    admin.is_active = False
    db.commit()
    assert client.get("/auth/me", headers=headers).status_code == 401


def test_dashboard_checks(client, admin, make_shop, make_staff):
    owner, shop, branch = make_shop()
    employee = make_staff(shop, branch, "emp@bubbles.test")

    assert client.get("/admin/check-auth", headers=auth_headers(admin)).status_code == 200
    assert client.get("/admin/check-auth", headers=auth_headers(owner)).status_code == 403

    owner_check = client.get("/owner/check-auth", headers=auth_headers(owner))
    assert owner_check.status_code == 200
    assert owner_check.json()["shop"]["id"] == shop.id

    employee_check = client.get("/employee/check-auth", headers=auth_headers(employee))
    assert employee_check.status_code == 200
    assert employee_check.json()["branches"][0]["id"] == branch.id
    assert client.get("/employee/check-auth", headers=auth_headers(owner)).status_code == 403


def test_logout_writes_activity(client, db, admin):
    response = client.post("/auth/logout", headers=auth_headers(admin))
    assert response.status_code == 200
    assert db.query(ActivityLog).filter(ActivityLog.action == "logout").count() == 1
