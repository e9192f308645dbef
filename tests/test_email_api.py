import pytest
from fastapi.testclient import TestClient

from billing_backend.app.core.exceptions import ConfigurationError, EmailAuthError
from billing_backend.app.db.base import Base
from billing_backend.app.db.session import engine
from billing_backend.app.main import app
from billing_backend.app.services.mailer import get_mailer


class RecordingMailer:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    def send(self, email):
        if self.error is not None:
            raise self.error
        self.sent.append(email)
        return f"<message-{len(self.sent)}@example.com>"


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    app.dependency_overrides.pop(get_mailer, None)


def use_mailer(mailer):
    app.dependency_overrides[get_mailer] = lambda: mailer
    return mailer


def register_and_login(client: TestClient, email: str, password: str) -> str:
    client.post("/auth/register", json={"email": email, "password": password})
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    return resp.json()["access_token"]


def create_invoice(client: TestClient, token: str, **overrides) -> dict:
    headers = {"Authorization": f"Bearer {token}"}
    business = client.post(
        "/businesses/",
        json={
            "name": "Acme Traders",
            "phone": "9876543210",
            "email": "billing@acme.in",
            "address": {"street": "12 Market Road", "city": "Pune", "state": "MH", "zip_code": "411001", "country": "India"},
        },
        headers=headers,
    ).json()
    payload = {
        "customer_name": "Jane Customer",
        "customer_email": "jane@example.com",
        "items": [{"name": "Consulting", "quantity": 2, "unit_price": "50.00"}],
    }
    payload.update(overrides)
    resp = client.post(f"/businesses/{business['id']}/invoices", json=payload, headers=headers)
    assert resp.status_code == 201
    return resp.json()


def test_email_sends_to_customer_and_marks_draft_sent():
    mailer = use_mailer(RecordingMailer())
    client = TestClient(app)
    token = register_and_login(client, "owner@example.com", "secret1")
    headers = {"Authorization": f"Bearer {token}"}
    invoice = create_invoice(client, token)

    resp = client.post(f"/invoices/{invoice['id']}/email", json={"message": "Thanks for the order"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "message_id": "<message-1@example.com>",
        "message": "Email sent successfully",
        "status": "sent",
    }
    email = mailer.sent[0]
    assert email.to == "jane@example.com"
    assert email.subject == f"Invoice {invoice['invoice_number']} - Acme Traders"
    assert "Thanks for the order" in email.text_body
    assert "Jane Customer" in email.html_body

    assert client.get(f"/invoices/{invoice['id']}", headers=headers).json()["status"] == "sent"


def test_email_on_approved_invoice_keeps_status():
    use_mailer(RecordingMailer())
    client = TestClient(app)
    token = register_and_login(client, "owner@example.com", "secret1")
    headers = {"Authorization": f"Bearer {token}"}
    invoice = create_invoice(client, token)
    client.post(f"/invoices/{invoice['id']}/approve", headers=headers)

    resp = client.post(f"/invoices/{invoice['id']}/email", json={"to": "accounts@client.in", "subject": "Copy"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"


def test_email_requires_a_recipient():
    use_mailer(RecordingMailer())
    client = TestClient(app)
    token = register_and_login(client, "owner@example.com", "secret1")
    invoice = create_invoice(client, token, customer_email=None)
    resp = client.post(f"/invoices/{invoice['id']}/email", json={}, headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Recipient email is required"


def test_transport_failure_leaves_invoice_draft():
    use_mailer(RecordingMailer(error=EmailAuthError()))
    client = TestClient(app)
    token = register_and_login(client, "owner@example.com", "secret1")
    headers = {"Authorization": f"Bearer {token}"}
    invoice = create_invoice(client, token)

    resp = client.post(f"/invoices/{invoice['id']}/email", json={}, headers=headers)
    assert resp.status_code == 502
    assert resp.json() == {
        "detail": "Email authentication failed. Please check your email credentials.",
        "error_code": "EMAIL_AUTH_FAILED",
    }
    assert client.get(f"/invoices/{invoice['id']}", headers=headers).json()["status"] == "draft"


def test_unconfigured_transport_is_service_unavailable():
    use_mailer(RecordingMailer(error=ConfigurationError("Email service not configured.", missing=["EMAIL_USER", "EMAIL_PASS"])))
    client = TestClient(app)
    token = register_and_login(client, "owner@example.com", "secret1")
    invoice = create_invoice(client, token)

    resp = client.post(f"/invoices/{invoice['id']}/email", json={}, headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 503
    assert resp.json()["missing"] == ["EMAIL_USER", "EMAIL_PASS"]
