import pytest
from fastapi.testclient import TestClient

from billing_backend.app.db.base import Base
from billing_backend.app.db.session import engine
from billing_backend.app.main import app


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


def business_payload(**overrides):
    payload = {
        "name": "Acme Traders",
        "phone": "+919876543210",
        "email": "billing@acme.in",
        "address": {
            "street": "12 Market Road",
            "city": "Pune",
            "state": "MH",
            "zip_code": "411001",
            "country": "India",
        },
    }
    payload.update(overrides)
    return payload


def test_create_business_defaults_currency():
    client = TestClient(app)
    token = register_and_login(client, "owner@example.com", "secret1")
    resp = client.post("/businesses/", json=business_payload(), headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["name"] == "Acme Traders"
    assert body["currency"] == "INR"
    assert body["address"]["city"] == "Pune"
    assert body["version"] == 1


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"name": " "}, "Business name is required"),
        ({"phone": ""}, "Phone number is required"),
        ({"email": ""}, "Email is required"),
        ({"email": "not-an-email"}, "Invalid email format"),
        ({"email": "jane@example"}, "Invalid email format"),
        ({"email": "jane@@example.com"}, "Invalid email format"),
        ({"phone": "call me"}, "Invalid phone number format"),
        ({"phone": "0123"}, "Invalid phone number format"),
        ({"address": {"street": "12 Market Road", "city": "Pune"}}, "Complete address is required"),
    ],
)
def test_business_validation(overrides, message):
    client = TestClient(app)
    token = register_and_login(client, "owner@example.com", "secret1")
    resp = client.post("/businesses/", json=business_payload(**overrides), headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 400
    assert resp.json() == {"detail": message, "error_code": "VALIDATION_ERROR"}


def test_businesses_are_scoped_to_owner():
    client = TestClient(app)
    token_a = register_and_login(client, "a@example.com", "secret1")
    token_b = register_and_login(client, "b@example.com", "secret1")
    created = client.post("/businesses/", json=business_payload(), headers={"Authorization": f"Bearer {token_a}"}).json()

    resp = client.get("/businesses/", headers={"Authorization": f"Bearer {token_b}"})
    assert resp.json() == []

    resp = client.get(f"/businesses/{created['id']}", headers={"Authorization": f"Bearer {token_b}"})
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "BUSINESS_NOT_FOUND"


def test_update_business_and_stale_version_conflict():
    client = TestClient(app)
    token = register_and_login(client, "owner@example.com", "secret1")
    headers = {"Authorization": f"Bearer {token}"}
    created = client.post("/businesses/", json=business_payload(), headers=headers).json()

    resp = client.patch(
        f"/businesses/{created['id']}",
        json={"name": "Acme Retail", "currency": "usd", "expected_version": 1},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Acme Retail"
    assert resp.json()["currency"] == "USD"
    assert resp.json()["version"] == 2

    resp = client.patch(f"/businesses/{created['id']}", json={"name": "Stale", "expected_version": 1}, headers=headers)
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "CONFLICT"
