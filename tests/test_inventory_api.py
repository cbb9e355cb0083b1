from datetime import timedelta

from sqlmodel import select

from models import ActivityLog, utcnow


def create_item(client, **overrides):
    payload = {"name": "Canned Corn", "category": "Canned Goods", "quantity": 24, "unit": "cans"}
    payload.update(overrides)
    response = client.post("/api/inventory", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_returns_persisted_item_with_status(client, user):
    body = create_item(client, notes="donated by church")

    assert body["id"] > 0
    assert body["low_stock_threshold"] == 5
    assert body["created_by"] == user.id
    assert body["status"] == "In Stock"
    assert body["created_at"] and body["updated_at"]


def test_create_requires_mandatory_fields(client):
    response = client.post("/api/inventory", json={"name": "Beans", "quantity": 3})

    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Invalid data"
    assert {error["field"] for error in body["errors"]} == {"category", "unit"}


def test_create_rejects_negative_quantity_and_unknown_category(client):
    response = client.post(
        "/api/inventory",
        json={"name": "Beans", "category": "Toys", "quantity": -1, "unit": "cans"},
    )

    assert response.status_code == 400
    assert {error["field"] for error in response.json()["errors"]} == {"category", "quantity"}


def test_get_missing_item_is_404(client):
    response = client.get("/api/inventory/12345")
    assert response.status_code == 404
    assert response.json() == {"detail": "Item not found"}


def test_non_integer_id_is_validation_error(client):
    response = client.get("/api/inventory/abc")
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "item_id"


def test_update_accepts_any_subset(client):
    item = create_item(client)

    response = client.put(f"/api/inventory/{item['id']}", json={"quantity": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["quantity"] == 2
    assert body["name"] == "Canned Corn"
    assert body["status"] == "Low Stock"


def test_update_cannot_null_required_field(client):
    item = create_item(client)

    response = client.put(f"/api/inventory/{item['id']}", json={"name": None})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "name"


def test_update_missing_item_is_404(client, session):
    response = client.put("/api/inventory/777", json={"quantity": 1})

    assert response.status_code == 404
    assert session.exec(select(ActivityLog)).all() == []


def test_delete_then_get(client, session):
    item = create_item(client)

    response = client.delete(f"/api/inventory/{item['id']}")

    assert response.status_code == 204
    assert response.content == b""
    assert client.get(f"/api/inventory/{item['id']}").status_code == 404
    actions = [row.action for row in session.exec(select(ActivityLog).order_by(ActivityLog.id)).all()]
    assert actions == ["create", "delete"]


def test_delete_missing_item_is_silent_noop(client, session):
    response = client.delete("/api/inventory/4040")

    assert response.status_code == 204
    assert session.exec(select(ActivityLog)).all() == []


def test_list_filters(client):
    create_item(client, name="Whole Milk", category="Dairy")
    create_item(client, name="Milk Bread", category="Bakery")
    create_item(client, name="Greek Yogurt", category="Dairy", quantity=0)

    dairy = client.get("/api/inventory", params={"category": "Dairy"}).json()
    assert [item["name"] for item in dairy] == ["Greek Yogurt", "Whole Milk"]

    milk = client.get("/api/inventory", params={"search": "milk"}).json()
    assert [item["name"] for item in milk] == ["Milk Bread", "Whole Milk"]

    out = client.get("/api/inventory", params={"status": "Out of Stock"}).json()
    assert [item["name"] for item in out] == ["Greek Yogurt"]

    by_quantity = client.get("/api/inventory", params={"sort_by": "quantity", "sort_order": "desc"}).json()
    assert [item["quantity"] for item in by_quantity] == [24, 24, 0]


def test_list_reports_expiring_status(client):
    soon = (utcnow().date() + timedelta(days=3)).isoformat()
    create_item(client, name="Lettuce", category="Fresh Produce", quantity=50, expiry_date=soon)

    items = client.get("/api/inventory", params={"status": "Expiring Soon"}).json()

    assert [item["name"] for item in items] == ["Lettuce"]
    assert items[0]["status"] == "Expires Soon"
    assert items[0]["expiry_date"] == soon


def test_requires_session(anon_client):
    assert anon_client.get("/api/inventory").status_code == 401
    assert anon_client.post("/api/inventory", json={}).status_code == 401
