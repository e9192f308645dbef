from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from billing_backend.app.db.base import Base
from billing_backend.app.db.session import SessionLocal, engine
from billing_backend.app.main import app
from billing_backend.app.models.price_history import PriceHistory


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def register_and_login(client: TestClient, email: str, password: str) -> str:
    client.post("/auth/register", json={"email": email, "password": password})
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    return resp.json()["access_token"]


def create_business(client: TestClient, token: str) -> int:
    resp = client.post(
        "/businesses/",
        json={
            "name": "Acme Traders",
            "phone": "9876543210",
            "email": "billing@acme.in",
            "address": {"street": "12 Market Road", "city": "Pune", "state": "MH", "zip_code": "411001", "country": "India"},
        },
        headers={"Authorization": f"Bearer {token}"},
    )
    assert resp.status_code == 201
    return resp.json()["id"]


def create_product(client: TestClient, token: str, business_id: int, **overrides) -> dict:
    payload = {"name": "Widget", "price": "10.00", "description": "Blue widget"}
    payload.update(overrides)
    resp = client.post(f"/businesses/{business_id}/products", json=payload, headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 201
    return resp.json()


def test_create_and_list_products():
    client = TestClient(app)
    token = register_and_login(client, "owner@example.com", "secret1")
    headers = {"Authorization": f"Bearer {token}"}
    business_id = create_business(client, token)
    create_product(client, token, business_id, name="Widget")
    create_product(client, token, business_id, name="Retired", is_active=False)

    resp = client.get(f"/businesses/{business_id}/products", headers=headers)
    assert sorted(p["name"] for p in resp.json()) == ["Retired", "Widget"]

    resp = client.get(f"/businesses/{business_id}/products?active_only=true", headers=headers)
    assert [p["name"] for p in resp.json()] == ["Widget"]


@pytest.mark.parametrize(
    "payload,message",
    [
        ({"name": "", "price": "5"}, "Product name is required"),
        ({"name": "Free", "price": "0"}, "Valid price is required"),
        ({"name": "Negative", "price": "-1"}, "Valid price is required"),
    ],
)
def test_product_validation(payload, message):
    client = TestClient(app)
    token = register_and_login(client, "owner@example.com", "secret1")
    business_id = create_business(client, token)
    resp = client.post(f"/businesses/{business_id}/products", json=payload, headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == message


def test_price_change_writes_one_history_entry():
    client = TestClient(app)
    token = register_and_login(client, "owner@example.com", "secret1")
    headers = {"Authorization": f"Bearer {token}"}
    business_id = create_business(client, token)
    product = create_product(client, token, business_id, price="10.00")

    resp = client.patch(f"/products/{product['id']}", json={"price": "12.00"}, headers=headers)
    assert resp.status_code == 200
    assert Decimal(resp.json()["price"]) == Decimal("12.00")

    history = client.get(f"/products/{product['id']}/price-history", headers=headers).json()
    assert len(history) == 1
    assert Decimal(history[0]["old_price"]) == Decimal("10.00")
    assert Decimal(history[0]["new_price"]) == Decimal("12.00")
    assert history[0]["changed_by"] == "owner@example.com"
    assert history[0]["reason"] == "Price update"


def test_unchanged_price_and_other_edits_write_no_history():
    client = TestClient(app)
    token = register_and_login(client, "owner@example.com", "secret1")
    headers = {"Authorization": f"Bearer {token}"}
    business_id = create_business(client, token)
    product = create_product(client, token, business_id, price="10.00")

    resp = client.patch(f"/products/{product['id']}", json={"price": "10.00", "category": "Tools"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["category"] == "Tools"
    assert client.get(f"/products/{product['id']}/price-history", headers=headers).json() == []


def test_history_newest_first_with_custom_reason():
    client = TestClient(app)
    token = register_and_login(client, "owner@example.com", "secret1")
    headers = {"Authorization": f"Bearer {token}"}
    business_id = create_business(client, token)
    product = create_product(client, token, business_id, price="10.00")

    client.patch(f"/products/{product['id']}", json={"price": "11.00"}, headers=headers)
    client.patch(
        f"/products/{product['id']}",
        json={"price": "15.00", "reason": "Price updated via edit form"},
        headers=headers,
    )
    history = client.get(f"/products/{product['id']}/price-history", headers=headers).json()
    assert [Decimal(h["new_price"]) for h in history] == [Decimal("15.00"), Decimal("11.00")]
    assert history[0]["reason"] == "Price updated via edit form"


def test_history_survives_product_deletion():
    client = TestClient(app)
    token = register_and_login(client, "owner@example.com", "secret1")
    headers = {"Authorization": f"Bearer {token}"}
    business_id = create_business(client, token)
    product = create_product(client, token, business_id, price="10.00")
    client.patch(f"/products/{product['id']}", json={"price": "12.00"}, headers=headers)

    resp = client.delete(f"/products/{product['id']}", headers=headers)
    assert resp.status_code == 204
    assert client.get(f"/products/{product['id']}", headers=headers).status_code == 404

    db = SessionLocal()
    try:
        assert db.query(PriceHistory).filter(PriceHistory.product_id == product["id"]).count() == 1
    finally:
        db.close()


def test_stale_product_update_conflicts_without_history():
    client = TestClient(app)
    token = register_and_login(client, "owner@example.com", "secret1")
    headers = {"Authorization": f"Bearer {token}"}
    business_id = create_business(client, token)
    product = create_product(client, token, business_id, price="10.00")
    client.patch(f"/products/{product['id']}", json={"name": "Widget v2"}, headers=headers)

    resp = client.patch(f"/products/{product['id']}", json={"price": "20.00", "expected_version": 1}, headers=headers)
    assert resp.status_code == 409
    assert client.get(f"/products/{product['id']}/price-history", headers=headers).json() == []


def test_other_owner_cannot_see_product():
    client = TestClient(app)
    token_a = register_and_login(client, "a@example.com", "secret1")
    token_b = register_and_login(client, "b@example.com", "secret1")
    product = create_product(client, token_a, create_business(client, token_a))
    resp = client.get(f"/products/{product['id']}", headers={"Authorization": f"Bearer {token_b}"})
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "PRODUCT_NOT_FOUND"
