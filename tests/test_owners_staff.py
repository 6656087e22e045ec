from conftest import DEFAULT_PASSWORD, auth_headers
from sqlalchemy.exc import IntegrityError

from laundrygo.domain.users.repository import UserRepository
from laundrygo.models import ActivityLog, Shop, ShopUserAssignment, User


def staff_payload(branch_id, **overrides):
    payload = {
        "full_name": "Eddie Employee",
        "email": "eddie@bubbles.test",
        "password": "spinspin1",
        "role": "employee",
        "branch_id": branch_id,
    }
    payload.update(overrides)
    return payload


def test_admin_creates_owner_for_unowned_shop(client, db, admin):
    headers = auth_headers(admin)
    shop_id = client.post("/admin/shops", json={"name": "Orphan Wash"}, headers=headers).json()["id"]

    response = client.post(
        "/admin/owners",
        json={"full_name": "New Owner", "email": "new@orphan.test", "password": "ownerpass", "shop_id": shop_id},
        headers=headers,
    )

    assert response.status_code == 201
    assert response.json()["shop"]["id"] == shop_id
    db.expire_all()
    owner = db.query(User).filter(User.email == "new@orphan.test").one()
    assert db.get(Shop, shop_id).owner_id == owner.id

    second = client.post(
        "/admin/owners",
        json={"full_name": "Other", "email": "other@orphan.test", "password": "ownerpass", "shop_id": shop_id},
        headers=headers,
    )
    assert second.status_code == 409

    listing = client.get("/admin/owners", headers=headers)
    assert [o["email"] for o in listing.json()] == ["new@orphan.test"]


def test_admin_moves_owner_to_another_shop(client, db, admin, make_shop):
    owner, shop, _ = make_shop()
    headers = auth_headers(admin)
    target_id = client.post("/admin/shops", json={"name": "Second Shop"}, headers=headers).json()["id"]

    response = client.put(f"/admin/owners/{owner.id}", json={"shop_id": target_id}, headers=headers)

    assert response.status_code == 200
    assert response.json()["shop"]["id"] == target_id
    db.expire_all()
    assert db.get(Shop, shop.id).owner_id is None
    assert db.get(Shop, target_id).owner_id == owner.id


def test_owner_cannot_be_moved_onto_owned_shop(client, admin, make_shop):
    owner, _, _ = make_shop()
    _, rival_shop, _ = make_shop(name="Rival Wash", owner_email="rival@wash.test")

    response = client.put(f"/admin/owners/{owner.id}", json={"shop_id": rival_shop.id}, headers=auth_headers(admin))
    assert response.status_code == 409


def test_owner_hires_employee_who_can_log_in(client, db, make_shop):
    owner, _, branch = make_shop()

    response = client.post("/owner/users", json=staff_payload(branch.id), headers=auth_headers(owner))

    assert response.status_code == 201
    assert response.json()["role"] == "employee"
    assert response.json()["branch"]["id"] == branch.id

    login = client.post("/auth/login", json={"email": "eddie@bubbles.test", "password": "spinspin1"})
    assert login.json()["redirectTo"] == "/employee"
    assert db.query(ActivityLog).filter(ActivityLog.action == "create_user").count() == 1


def test_rider_alias_maps_to_delivery(client, make_shop):
    owner, _, branch = make_shop()
    response = client.post(
        "/owner/users", json=staff_payload(branch.id, role="Rider"), headers=auth_headers(owner)
    )
    assert response.status_code == 201
    assert response.json()["role"] == "delivery"


def test_unknown_staff_role_rejected(client, make_shop):
    owner, _, branch = make_shop()
    response = client.post(
        "/owner/users", json=staff_payload(branch.id, role="manager"), headers=auth_headers(owner)
    )
    assert response.status_code == 422


def test_staff_branch_must_belong_to_owner(client, make_shop):
    owner, _, _ = make_shop()
    _, _, rival_branch = make_shop(name="Rival Wash", owner_email="rival@wash.test")
    response = client.post("/owner/users", json=staff_payload(rival_branch.id), headers=auth_headers(owner))
    assert response.status_code == 403


def test_staff_role_swap_and_soft_delete(client, db, make_shop, make_staff):
    owner, shop, branch = make_shop()
    employee = make_staff(shop, branch, "emp@bubbles.test")
    headers = auth_headers(owner)

    swapped = client.put(f"/owner/users/{employee.id}", json={"role": "delivery"}, headers=headers)
    assert swapped.status_code == 200
    assert swapped.json()["role"] == "delivery"
    db.expire_all()
    assert db.get(User, employee.id).role_names == ["delivery"]

    removed = client.delete(f"/owner/users/{employee.id}", headers=headers)
    assert removed.status_code == 200
    db.expire_all()
    assignment = db.query(ShopUserAssignment).filter(ShopUserAssignment.user_id == employee.id).one()
    assert assignment.is_active is False
    assert db.get(User, employee.id) is not None

    login = client.post("/auth/login", json={"email": "emp@bubbles.test", "password": DEFAULT_PASSWORD})
    assert login.status_code == 200
    me = client.get("/employee/check-auth", headers=auth_headers(employee))
    assert me.status_code == 403


def test_staff_update_constraint_violation_rolls_back(client, db, make_shop, make_staff, monkeypatch):
    owner, shop, branch = make_shop()
    employee = make_staff(shop, branch, "emp@bubbles.test")

    def fail_grant(db, user, role_name):
        raise IntegrityError("INSERT INTO user_roles", {}, Exception("UNIQUE constraint failed: uq_user_role"))

    monkeypatch.setattr(UserRepository, "grant_role", staticmethod(fail_grant))
    response = client.put(
        f"/owner/users/{employee.id}", json={"role": "delivery", "full_name": "Renamed"}, headers=auth_headers(owner)
    )

    assert response.status_code == 409
    db.expire_all()
    assert db.get(User, employee.id).role_names == ["employee"]
    assert db.get(User, employee.id).full_name == "Employee Person"
    assignment = db.query(ShopUserAssignment).filter(ShopUserAssignment.user_id == employee.id).one()
    assert assignment.role_in_shop == "employee"


def test_staff_listing_filters_by_branch(client, make_shop, make_staff):
    owner, shop, branch = make_shop()
    headers = auth_headers(owner)
    other = client.post(
        "/owner/branches",
        json={"name": "East", "address": "3 Dryer Lane", "latitude": 14.5, "longitude": 121.1},
        headers=headers,
    ).json()
    make_staff(shop, branch, "a@bubbles.test")
    client.post("/owner/users", json=staff_payload(other["id"], email="b@bubbles.test"), headers=headers)

    everyone = client.get("/owner/users", headers=headers).json()
    east_only = client.get("/owner/users", params={"branch_id": other["id"]}, headers=headers).json()

    assert {s["email"] for s in everyone} == {"a@bubbles.test", "b@bubbles.test"}
    assert [s["email"] for s in east_only] == ["b@bubbles.test"]


def test_admin_deletes_user(client, db, admin, make_user):
    customer_id = make_user("gone@example.com", "customer").id
    headers = auth_headers(admin)

    assert client.delete(f"/admin/users/{admin.id}", headers=headers).status_code == 400
    assert client.delete(f"/admin/users/{customer_id}", headers=headers).status_code == 200
    assert client.delete(f"/admin/users/{customer_id}", headers=headers).status_code == 404
