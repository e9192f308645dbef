"""Form-level checks shared by the business, product and invoice services."""

import re
from typing import Optional

from email_validator import EmailNotValidError, validate_email

from billing_backend.app.core.exceptions import ValidationError

PHONE_RE = re.compile(r"^[\+]?[1-9][\d]{0,15}$")


def is_valid_email(email: str) -> bool:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_RE.match(re.sub(r"[\s\-()]", "", phone)))


def require_text(value: Optional[str], message: str, field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(message, field=field)
    return value.strip()


def optional_email(value: Optional[str], field: str = "email") -> Optional[str]:
    if value is None or not value.strip():
        return None
    value = value.strip()
    if not is_valid_email(value):
        raise ValidationError("Invalid email format", field=field)
    return value
