from conftest import auth_headers

from laundrygo.models import AccountRequest, AdminAuditLog, Branch, Shop, ShopService, User


def request_payload(**overrides):
    payload = {
        "name": "Olivia Owner",
        "email": "olivia@suds.test",
        "contact": "+63 912 345 6789",
        "shopName": "Suds & Duds",
        "shopAddress": "22 Rinse Road",
        "latitude": 14.55,
        "longitude": 121.02,
    }
    payload.update(overrides)
    return payload


def submit(client, **overrides):
    return client.post("/account-requests", json=request_payload(**overrides))


def test_submit_and_list_pending(client, admin):
    response = submit(client)
    assert response.status_code == 201
    request_id = response.json()["id"]

    listing = client.get("/admin/account-requests", headers=auth_headers(admin))
    assert listing.status_code == 200
    assert [r["id"] for r in listing.json()] == [request_id]
    assert listing.json()[0]["shop_name"] == "Suds & Duds"


def test_duplicate_pending_requests_conflict(client):
    assert submit(client).status_code == 201
    assert submit(client, shopName="Another Shop").status_code == 409
    assert submit(client, email="someone@else.test").status_code == 409


def test_request_for_existing_account_or_shop_conflicts(client, make_shop):
    make_shop(name="Suds & Duds", owner_email="taken@suds.test")
    assert submit(client, email="taken@suds.test", shopName="Fresh Name").status_code == 409
    assert submit(client, shopName="suds & duds").status_code == 409


def test_invalid_coordinates_rejected(client):
    assert submit(client, latitude=95).status_code == 422
    assert submit(client, longitude=-181).status_code == 422


def test_approve_provisions_owner_shop_and_branch(client, db, admin):
    request_id = submit(client).json()["id"]

    response = client.put(
        f"/admin/account-requests/{request_id}", json={"action": "approve"}, headers=auth_headers(admin)
    )

    assert response.status_code == 200
    body = response.json()
    password = body["temporaryPassword"]
    assert len(password) == 12

    owner = db.query(User).filter(User.email == "olivia@suds.test").one()
    assert owner.role_names == ["owner"]
    shop = db.query(Shop).filter(Shop.name == "Suds & Duds").one()
    assert shop.owner_id == owner.id
    assert shop.description == "Laundry shop at 22 Rinse Road"
    branch = db.query(Branch).filter(Branch.shop_id == shop.id).one()
    assert branch.name == "Main Branch"
    assert db.query(ShopService).filter(ShopService.branch_id == branch.id).count() == 3
    assert db.query(AccountRequest).count() == 0
    assert db.query(AdminAuditLog).filter(AdminAuditLog.action == "approve_account_request").count() == 1

    login = client.post("/auth/login", json={"email": "olivia@suds.test", "password": password})
    assert login.status_code == 200
    assert login.json()["redirectTo"] == "/owner"


def test_reject_and_invalid_action(client, db, admin):
    request_id = submit(client).json()["id"]
    headers = auth_headers(admin)

    bad = client.put(f"/admin/account-requests/{request_id}", json={"action": "maybe"}, headers=headers)
    assert bad.status_code == 400

    rejected = client.put(f"/admin/account-requests/{request_id}", json={"action": "reject"}, headers=headers)
    assert rejected.status_code == 200
    assert db.query(AccountRequest).count() == 0
    assert db.query(User).filter(User.email == "olivia@suds.test").first() is None


def test_review_missing_request(client, admin):
    response = client.put("/admin/account-requests/999", json={"action": "approve"}, headers=auth_headers(admin))
    assert response.status_code == 404


def test_admin_endpoints_require_admin(client, make_user):
    customer = make_user("c@example.com", "customer")
    assert client.get("/admin/account-requests").status_code == 401
    assert client.get("/admin/account-requests", headers=auth_headers(customer)).status_code == 403


def test_submission_rate_limited(client):
    for i in range(5):
        response = submit(client, email=f"owner{i}@suds.test", shopName=f"Shop {i}")
        assert response.status_code == 201
    limited = submit(client, email="owner9@suds.test", shopName="Shop 9")
    assert limited.status_code == 429
    assert "Retry-After" in limited.headers
