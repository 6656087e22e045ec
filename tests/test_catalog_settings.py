from conftest import auth_headers

from laundrygo.models import ActivityLog, ShopService


def test_services_listing_shows_defaults_and_methods(client, make_shop):
    owner, _, branch = make_shop()

    response = client.get("/owner/services", headers=auth_headers(owner))

    assert response.status_code == 200
    body = response.json()
    assert body["branch_id"] == branch.id
    assert [s["name"] for s in body["services"]] == ["Wash & Fold", "Wash & Iron", "Dry Clean"]
    assert body["methods"]["self_service_enabled"] is False
    assert body["methods"]["dropoff_enabled"] is True


def test_service_create_update_and_soft_delete(client, db, make_shop):
    owner, _, branch = make_shop()
    headers = auth_headers(owner)

    created = client.post(
        "/owner/services", json={"branch_id": branch.id, "name": "Comforter", "price": 150}, headers=headers
    )
    assert created.status_code == 201
    service_id = created.json()["id"]

    duplicate = client.post(
        "/owner/services", json={"branch_id": branch.id, "name": "comforter", "price": 10}, headers=headers
    )
    assert duplicate.status_code == 409

    updated = client.put(f"/owner/services/{service_id}", json={"price": 175}, headers=headers)
    assert updated.json()["price"] == 175

    assert client.delete(f"/owner/services/{service_id}", headers=headers).status_code == 200
    db.expire_all()
    assert db.get(ShopService, service_id).is_active is False
    names = [s["name"] for s in client.get("/owner/services", headers=headers).json()["services"]]
    assert "Comforter" not in names


def test_service_price_must_be_positive(client, make_shop):
    owner, _, branch = make_shop()
    response = client.post(
        "/owner/services", json={"branch_id": branch.id, "name": "Free", "price": 0}, headers=auth_headers(owner)
    )
    assert response.status_code == 422


def test_toggle_method(client, make_shop):
    owner, _, branch = make_shop()
    headers = auth_headers(owner)

    response = client.patch(
        "/owner/methods", json={"branch_id": branch.id, "method": "self_service", "enabled": True}, headers=headers
    )
    assert response.json() == {"branch_id": branch.id, "method": "self_service", "enabled": True}

    unknown = client.patch(
        "/owner/methods", json={"branch_id": branch.id, "method": "teleport", "enabled": True}, headers=headers
    )
    assert unknown.status_code == 400


def test_addon_create_override_and_final_price(client, make_shop):
    owner, _, branch = make_shop()
    headers = auth_headers(owner)

    created = client.post(
        "/owner/detergents",
        json={"branch_id": branch.id, "type": "detergent", "name": "Ariel", "base_price": 15},
        headers=headers,
    )
    assert created.status_code == 201
    detergent_id = created.json()["id"]
    assert created.json()["final_price"] == 15

    override = client.patch(
        "/owner/detergents",
        json={"branch_id": branch.id, "type": "detergent", "item_id": detergent_id, "custom_price": 20},
        headers=headers,
    )
    assert override.status_code == 200
    assert override.json()["final_price"] == 20

    listing = client.get("/owner/detergents", headers=headers).json()
    assert [(d["name"], d["final_price"]) for d in listing["detergents"]] == [("Ariel", 20)]
    assert listing["softeners"] == []

    duplicate = client.post(
        "/owner/detergents",
        json={"branch_id": branch.id, "type": "detergent", "name": "ariel", "base_price": 1},
        headers=headers,
    )
    assert duplicate.status_code == 409


def test_clearing_custom_price_falls_back_to_base_price(client, make_shop):
    owner, _, branch = make_shop()
    headers = auth_headers(owner)
    detergent_id = client.post(
        "/owner/detergents",
        json={"branch_id": branch.id, "type": "detergent", "name": "Tide", "base_price": 15},
        headers=headers,
    ).json()["id"]
    target = {"branch_id": branch.id, "type": "detergent", "item_id": detergent_id}

    priced = client.patch("/owner/detergents", json={**target, "custom_price": 35}, headers=headers)
    assert priced.json()["final_price"] == 35

    hidden = client.patch("/owner/detergents", json={**target, "is_available": False}, headers=headers)
    assert hidden.json()["custom_price"] == 35
    assert hidden.json()["is_available"] is False

    cleared = client.patch("/owner/detergents", json={**target, "custom_price": None}, headers=headers)
    assert cleared.status_code == 200
    assert cleared.json()["custom_price"] is None
    assert cleared.json()["final_price"] == 15
    assert cleared.json()["is_available"] is False


def test_catalog_is_scoped_to_owner_shop(client, make_shop):
    owner, _, _ = make_shop()
    _, _, rival_branch = make_shop(name="Rival Wash", owner_email="rival@wash.test")
    response = client.get("/owner/services", params={"branch_id": rival_branch.id}, headers=auth_headers(owner))
    assert response.status_code == 404


def test_settings_overview(client, make_shop):
    owner, shop, branch = make_shop()

    response = client.get("/owner/settings", headers=auth_headers(owner))

    assert response.status_code == 200
    body = response.json()
    assert body["shop"]["id"] == shop.id
    assert body["branch"]["id"] == branch.id
    assert len(body["hours"]) == 7
    assert body["contacts"] == []


def test_update_hours(client, make_shop):
    owner, _, branch = make_shop()
    headers = auth_headers(owner)

    response = client.put(
        "/owner/settings/hours",
        json={
            "branch_id": branch.id,
            "hours": [
                {"day_of_week": 0, "open_time": "10:00", "close_time": "14:00", "is_closed": False},
                {"day_of_week": 6, "is_closed": True},
            ],
        },
        headers=headers,
    )
    assert response.status_code == 200

    hours = {h["day_of_week"]: h for h in client.get("/owner/settings", headers=headers).json()["hours"]}
    assert hours[0] == {"day_of_week": 0, "open_time": "10:00", "close_time": "14:00", "is_closed": False}
    assert hours[6]["is_closed"] is True
    assert len(hours) == 7


def test_hours_validation(client, make_shop):
    owner, _, branch = make_shop()
    headers = auth_headers(owner)

    backwards = client.put(
        "/owner/settings/hours",
        json={"branch_id": branch.id, "hours": [{"day_of_week": 1, "open_time": "18:00", "close_time": "08:00"}]},
        headers=headers,
    )
    assert backwards.status_code == 400

    repeated = client.put(
        "/owner/settings/hours",
        json={"branch_id": branch.id, "hours": [{"day_of_week": 1}, {"day_of_week": 1}]},
        headers=headers,
    )
    assert repeated.status_code == 400

    bad_time = client.put(
        "/owner/settings/hours",
        json={"branch_id": branch.id, "hours": [{"day_of_week": 1, "open_time": "25:00"}]},
        headers=headers,
    )
    assert bad_time.status_code == 422


def test_replace_contacts(client, db, make_shop):
    owner, _, branch = make_shop()
    headers = auth_headers(owner)
    url = "/owner/settings/contacts"

    first = client.put(
        url,
        json={
            "branch_id": branch.id,
            "contacts": [
                {"contact_type": "phone", "value": "0917 000 0000", "is_primary": True},
                {"contact_type": "facebook", "value": "fb.com/bubbles"},
            ],
        },
        headers=headers,
    )
    assert first.status_code == 200

    second = client.put(
        url, json={"branch_id": branch.id, "contacts": [{"contact_type": "email", "value": "hi@bubbles.test"}]},
        headers=headers,
    )
    assert second.status_code == 200
    contacts = client.get("/owner/settings", headers=headers).json()["contacts"]
    assert [(c["contact_type"], c["value"]) for c in contacts] == [("email", "hi@bubbles.test")]

    two_primary = client.put(
        url,
        json={
            "branch_id": branch.id,
            "contacts": [
                {"contact_type": "phone", "value": "1", "is_primary": True},
                {"contact_type": "email", "value": "2", "is_primary": True},
            ],
        },
        headers=headers,
    )
    assert two_primary.status_code == 400
    assert db.query(ActivityLog).filter(ActivityLog.action == "update_contacts").count() == 2


def test_owner_updates_shop_profile(client, make_shop):
    owner, _, _ = make_shop()
    response = client.put("/owner/settings/shop", json={"name": "Bubbles Deluxe"}, headers=auth_headers(owner))
    assert response.status_code == 200
    assert response.json()["name"] == "Bubbles Deluxe"
