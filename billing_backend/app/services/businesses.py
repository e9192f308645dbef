"""Business management."""

from typing import List

from sqlalchemy.orm import Session

from billing_backend.app.core.exceptions import NotFoundError, ValidationError
from billing_backend.app.core.settings import get_settings
from billing_backend.app.core.time import utc_now
from billing_backend.app.db.repository import Repository
from billing_backend.app.models.business import Business
from billing_backend.app.schemas.address import Address
from billing_backend.app.schemas.business import BusinessCreate, BusinessUpdate
from billing_backend.app.services.validation import is_valid_email, is_valid_phone, require_text

businesses = Repository(Business)


def _check_address(address: Address) -> dict:
    if not address.is_complete():
        raise ValidationError("Complete address is required", field="address")
    return address.model_dump()


def _check_phone(phone: str | None) -> str:
    phone = require_text(phone, "Phone number is required", "phone")
    if not is_valid_phone(phone):
        raise ValidationError("Invalid phone number format", field="phone")
    return phone


def _check_email(email: str | None) -> str:
    email = require_text(email, "Email is required", "email")
    if not is_valid_email(email):
        raise ValidationError("Invalid email format", field="email")
    return email


def create_business(db: Session, owner_id: int, payload: BusinessCreate) -> Business:
    record = {
        "owner_id": owner_id,
        "name": require_text(payload.name, "Business name is required", "name"),
        "phone": _check_phone(payload.phone),
        "email": _check_email(payload.email),
        "address": _check_address(payload.address),
        "currency": (payload.currency or get_settings().default_currency).upper(),
        "logo": payload.logo,
        "description": payload.description,
    }
    business = businesses.insert(db, record)
    db.commit()
    db.refresh(business)
    return business


def list_businesses(db: Session, owner_id: int) -> List[Business]:
    return businesses.query_by_field(db, "owner_id", owner_id, order_by="-created_at")


def get_owned_business(db: Session, business_id: int, owner_id: int) -> Business:
    business = businesses.get_by_id(db, business_id)
    if business is None or business.owner_id != owner_id:
        raise NotFoundError("Business", business_id)
    return business


def update_business(db: Session, business: Business, payload: BusinessUpdate) -> Business:
    data = payload.model_dump(exclude_unset=True, exclude={"expected_version"})
    changes = {}
    if "name" in data:
        changes["name"] = require_text(data["name"], "Business name is required", "name")
    if "phone" in data:
        changes["phone"] = _check_phone(data["phone"])
    if "email" in data:
        changes["email"] = _check_email(data["email"])
    if payload.address is not None:
        changes["address"] = _check_address(payload.address)
    if payload.currency is not None:
        changes["currency"] = payload.currency.upper()
    for field in ("description", "logo"):
        if field in data:
            changes[field] = data[field]
    changes["updated_at"] = utc_now()

    businesses.update(db, business, changes, expected_version=payload.expected_version)
    db.commit()
    db.refresh(business)
    return business


def set_logo(db: Session, business: Business, logo_path: str) -> Business:
    businesses.update(db, business, {"logo": logo_path, "updated_at": utc_now()})
    db.commit()
    db.refresh(business)
    return business
