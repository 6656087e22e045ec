import pytest
from conftest import auth_headers
from fastapi import HTTPException

from laundrygo.domain.catalog.repository import CatalogRepository
from laundrygo.domain.orders.repository import OrderRepository
from laundrygo.domain.orders.service import OrderService
from laundrygo.domain.orders.workflow import InvalidTransition, compute_amount, next_status
from laundrygo.models import ActivityLog, Order, OrderHistory, OrderItem, ShopService


@pytest.fixture
def laundromat(db, make_shop, make_staff, make_user):
    owner, shop, branch = make_shop()
    employee = make_staff(shop, branch, "emp@bubbles.test")
    rider = make_staff(shop, branch, "rider@bubbles.test", role="delivery")
    customer = make_user("cora@example.com", "customer", full_name="Cora Customer", phone="09170000000")

    detergent = CatalogRepository.add_type(db, "detergent", name="Ariel", base_price=15)
    CatalogRepository.upsert_override(db, "detergent", branch.id, detergent.id, is_available=True, custom_price=20)
    softener = CatalogRepository.add_type(db, "softener", name="Downy", base_price=10)
    CatalogRepository.upsert_override(db, "softener", branch.id, softener.id, is_available=False)
    db.commit()

    wash_fold = db.query(ShopService).filter(ShopService.branch_id == branch.id, ShopService.name == "Wash & Fold").one()
    return {
        "owner": owner,
        "shop": shop,
        "branch": branch,
        "employee": employee,
        "rider": rider,
        "customer": customer,
        "detergent_id": detergent.id,
        "softener_id": softener.id,
        "service_id": wash_fold.id,
    }


def walk_in(client, ctx, method="dropoff", **overrides):
    payload = {
        "branch_id": ctx["branch"].id,
        "customer_name": "Walter Walkin",
        "customer_contact": "0918 111 2222",
        "method": method,
        "service_id": ctx["service_id"],
        "detergent_id": ctx["detergent_id"],
    }
    payload.update(overrides)
    return client.post("/employee/orders", json=payload, headers=auth_headers(ctx["employee"]))


# ============================================================================
# WORKFLOW RULES
# ============================================================================


def test_next_status_follows_method():
    assert next_status("pending", "dropoff") == "in_progress"
    assert next_status("in_progress", "dropoff") == "completed"
    assert next_status("in_progress", "self_service") == "completed"
    assert next_status("in_progress", "delivery") == "delivering"
    assert next_status("in_progress", "pickup") == "delivering"
    assert next_status("delivering", "pickup") == "completed"
    with pytest.raises(InvalidTransition):
        next_status("completed", "dropoff")


def test_compute_amount_ignores_missing_addons():
    assert compute_amount(3.5, 60, 20, None) == 230.0
    assert compute_amount(1.25, 80) == 100.0


# ============================================================================
# EMPLOYEE
# ============================================================================


def test_employee_shop_data_hides_pickup(client, laundromat):
    response = client.get(
        "/employee/shop-data",
        params={"branch_id": laundromat["branch"].id},
        headers=auth_headers(laundromat["employee"]),
    )

    assert response.status_code == 200
    body = response.json()
    assert [m["code"] for m in body["methods"]] == ["delivery", "dropoff"]
    assert [d["name"] for d in body["detergents"]] == ["Ariel"]
    assert body["detergents"][0]["final_price"] == 20
    assert body["softeners"] == []


def test_intake_then_accept_prices_the_order(client, db, laundromat):
    created = walk_in(client, laundromat)
    assert created.status_code == 201
    order = created.json()
    assert order["order_status"] == "pending"
    assert order["detergent"] == {"id": laundromat["detergent_id"], "name": "Ariel", "price": 20.0}
    assert order["amount"] is None

    accepted = client.post(
        f"/employee/orders/{order['id']}/accept", json={"weight_kg": 3.5}, headers=auth_headers(laundromat["employee"])
    )

    assert accepted.status_code == 200
    body = accepted.json()
    assert body["previous_status"] == "pending"
    assert body["order_status"] == "in_progress"
    assert body["order"]["amount"] == 230.0
    item = db.query(OrderItem).filter(OrderItem.order_id == order["id"]).one()
    assert (item.quantity, item.price_per_unit, item.subtotal) == (3.5, 60.0, 210.0)


def test_accept_requires_positive_weight(client, laundromat):
    order_id = walk_in(client, laundromat).json()["id"]
    headers = auth_headers(laundromat["employee"])
    assert client.post(f"/employee/orders/{order_id}/accept", json={"weight_kg": 0}, headers=headers).status_code == 422


def test_dropoff_completion_archives_order(client, db, laundromat):
    headers = auth_headers(laundromat["employee"])
    order_id = walk_in(client, laundromat).json()["id"]
    client.post(f"/employee/orders/{order_id}/accept", json={"weight_kg": 2}, headers=headers)

    done = client.post(f"/employee/orders/{order_id}/advance", headers=headers)

    assert done.status_code == 200
    body = done.json()
    assert body["order_status"] == "completed"
    assert body["history"]["order_id"] == order_id
    assert body["history"]["method_label"] == "Drop Off"
    assert body["history"]["service_name"] == "Wash & Fold"
    assert body["history"]["amount"] == 140.0

    db.expire_all()
    assert db.query(Order).filter(Order.id == order_id).first() is None
    assert db.query(OrderItem).filter(OrderItem.order_id == order_id).count() == 0
    entry = db.query(OrderHistory).filter(OrderHistory.order_id == order_id).one()
    assert entry.completed_by == laundromat["employee"].id

    queue = client.get("/employee/orders", params={"branch_id": laundromat["branch"].id}, headers=headers).json()
    assert queue["pending"] == [] and queue["work_queue"] == []
    assert [h["order_id"] for h in queue["history"]] == [order_id]


def test_delivery_order_goes_through_rider(client, db, laundromat):
    employee_headers = auth_headers(laundromat["employee"])
    rider_headers = auth_headers(laundromat["rider"])
    order_id = walk_in(client, laundromat, method="delivery").json()["id"]
    client.post(f"/employee/orders/{order_id}/accept", json={"weight_kg": 1}, headers=employee_headers)

    out = client.post(f"/employee/orders/{order_id}/advance", headers=employee_headers)
    assert out.json()["order_status"] == "delivering"

    runs = client.get("/delivery/orders", headers=rider_headers)
    assert [o["id"] for o in runs.json()["orders"]] == [order_id]

    completed = client.post(f"/delivery/orders/{order_id}/complete", headers=rider_headers)
    assert completed.status_code == 200
    assert completed.json()["history"]["method_code"] == "delivery"
    assert client.get("/delivery/orders", headers=rider_headers).json()["orders"] == []

    again = client.post(f"/delivery/orders/{order_id}/complete", headers=rider_headers)
    assert again.status_code == 404


def test_rider_cannot_complete_order_still_in_progress(client, laundromat):
    order_id = walk_in(client, laundromat, method="delivery").json()["id"]
    client.post(
        f"/employee/orders/{order_id}/accept", json={"weight_kg": 1}, headers=auth_headers(laundromat["employee"])
    )
    response = client.post(f"/delivery/orders/{order_id}/complete", headers=auth_headers(laundromat["rider"]))
    assert response.status_code == 400


def test_explicit_status_must_be_next_step(client, laundromat):
    headers = auth_headers(laundromat["employee"])
    order_id = walk_in(client, laundromat, method="delivery").json()["id"]

    skip = client.put(f"/employee/orders/{order_id}", json={"order_status": "completed"}, headers=headers)
    assert skip.status_code == 400

    unweighed = client.put(f"/employee/orders/{order_id}", json={"order_status": "in_progress"}, headers=headers)
    assert unweighed.status_code == 400

    client.post(f"/employee/orders/{order_id}/accept", json={"weight_kg": 1}, headers=headers)
    wrong = client.put(f"/employee/orders/{order_id}", json={"order_status": "completed"}, headers=headers)
    assert wrong.status_code == 400
    right = client.put(f"/employee/orders/{order_id}", json={"order_status": "delivering"}, headers=headers)
    assert right.status_code == 200
    assert right.json()["order"]["order_status"] == "delivering"


def test_pending_orders_cannot_advance_or_be_accepted_twice(client, laundromat):
    headers = auth_headers(laundromat["employee"])
    order_id = walk_in(client, laundromat).json()["id"]

    assert client.post(f"/employee/orders/{order_id}/advance", headers=headers).status_code == 400
    client.post(f"/employee/orders/{order_id}/accept", json={"weight_kg": 1}, headers=headers)
    second = client.post(f"/employee/orders/{order_id}/accept", json={"weight_kg": 1}, headers=headers)
    assert second.status_code == 400


def test_intake_validates_catalog_choices(client, db, laundromat):
    disabled_method = walk_in(client, laundromat, method="self_service")
    assert disabled_method.status_code == 400

    unavailable_softener = walk_in(client, laundromat, softener_id=laundromat["softener_id"])
    assert unavailable_softener.status_code == 400

    retired = ShopService(branch_id=laundromat["branch"].id, name="Retired", price_per_kg=5, is_active=False)
    db.add(retired)
    db.commit()
    inactive_service = walk_in(client, laundromat, service_id=retired.id)
    assert inactive_service.status_code == 400


def test_employee_must_be_assigned_to_branch(client, laundromat, make_shop, make_staff):
    _, rival_shop, rival_branch = make_shop(name="Rival Wash", owner_email="rival@wash.test")
    outsider = make_staff(rival_shop, rival_branch, "outsider@wash.test")
    order_id = walk_in(client, laundromat).json()["id"]

    listing = client.get(
        "/employee/orders", params={"branch_id": laundromat["branch"].id}, headers=auth_headers(outsider)
    )
    assert listing.status_code == 403
    accept = client.post(f"/employee/orders/{order_id}/accept", json={"weight_kg": 1}, headers=auth_headers(outsider))
    assert accept.status_code == 403


def test_transitions_are_logged(client, db, laundromat):
    headers = auth_headers(laundromat["employee"])
    order_id = walk_in(client, laundromat).json()["id"]
    client.post(f"/employee/orders/{order_id}/accept", json={"weight_kg": 1}, headers=headers)
    client.post(f"/employee/orders/{order_id}/advance", headers=headers)

    entries = (
        db.query(ActivityLog)
        .filter(ActivityLog.action == "order_status_changed")
        .order_by(ActivityLog.id)
        .all()
    )
    assert [e.description for e in entries] == [
        f"Order #{order_id}: pending -> in_progress",
        f"Order #{order_id}: in_progress -> completed",
    ]
    assert all(e.branch_id == laundromat["branch"].id for e in entries)


# ============================================================================
# CONCURRENCY GUARD
# ============================================================================


def test_compare_and_set_only_moves_expected_status(db, laundromat, client):
    order_id = walk_in(client, laundromat).json()["id"]

    assert OrderRepository.compare_and_set_status(db, order_id, "in_progress", "delivering") is False
    assert OrderRepository.compare_and_set_status(db, order_id, "pending", "in_progress") is True
    db.commit()
    assert db.query(Order.order_status).filter(Order.id == order_id).scalar() == "in_progress"


def test_stale_accept_reports_conflict(client, db, laundromat):
    order_id = walk_in(client, laundromat).json()["id"]
    stale = db.get(Order, order_id)
    assert stale.order_status == "pending"

    # Another request accepts the order after this session read it
    client.post(
        f"/employee/orders/{order_id}/accept", json={"weight_kg": 1}, headers=auth_headers(laundromat["employee"])
    )

    with pytest.raises(HTTPException) as exc:
        OrderService(db).accept(laundromat["employee"], order_id, 2.0)
    assert exc.value.status_code == 409
    assert exc.value.detail == "Order was modified by another request"
    assert db.query(OrderItem).filter(OrderItem.order_id == order_id).count() == 1


def test_stale_completion_archives_once(client, db, laundromat):
    headers = auth_headers(laundromat["employee"])
    order_id = walk_in(client, laundromat).json()["id"]
    client.post(f"/employee/orders/{order_id}/accept", json={"weight_kg": 1}, headers=headers)
    stale = db.get(Order, order_id)
    assert stale.order_status == "in_progress"

    client.post(f"/employee/orders/{order_id}/advance", headers=headers)

    assert OrderRepository.archive_order(db, stale, "in_progress", completed_by=None) is None
    db.rollback()
    assert db.query(OrderHistory).filter(OrderHistory.order_id == order_id).count() == 1


# ============================================================================
# CUSTOMER
# ============================================================================


def test_customer_orders_pickup_and_sees_history(client, laundromat):
    customer_headers = auth_headers(laundromat["customer"])
    employee_headers = auth_headers(laundromat["employee"])
    branch_id = laundromat["branch"].id

    catalog = client.get(f"/customer/branches/{branch_id}/catalog", headers=customer_headers)
    assert "pickup" in [m["code"] for m in catalog.json()["methods"]]

    placed = client.post(
        "/customer/orders",
        json={"branch_id": branch_id, "method": "pickup", "service_id": laundromat["service_id"]},
        headers=customer_headers,
    )
    assert placed.status_code == 201
    order = placed.json()
    assert order["customer_name"] == "Cora Customer"
    assert order["customer_contact"] == "09170000000"

    mine = client.get("/customer/orders", headers=customer_headers).json()
    assert [o["id"] for o in mine["active"]] == [order["id"]]
    assert mine["history"] == []

    client.post(f"/employee/orders/{order['id']}/accept", json={"weight_kg": 2}, headers=employee_headers)
    client.post(f"/employee/orders/{order['id']}/advance", headers=employee_headers)
    client.post(f"/delivery/orders/{order['id']}/complete", headers=auth_headers(laundromat["rider"]))

    mine = client.get("/customer/orders", headers=customer_headers).json()
    assert mine["active"] == []
    assert [h["order_id"] for h in mine["history"]] == [order["id"]]
    assert mine["history"][0]["order_status"] == "completed"


def test_customer_endpoints_need_customer_role(client, laundromat):
    response = client.get("/customer/orders", headers=auth_headers(laundromat["employee"]))
    assert response.status_code == 403


def test_inactive_branch_catalog_is_hidden(client, db, laundromat):
    laundromat["branch"].is_active = False
    db.commit()
    response = client.get(
        f"/customer/branches/{laundromat['branch'].id}/catalog", headers=auth_headers(laundromat["customer"])
    )
    assert response.status_code == 404
