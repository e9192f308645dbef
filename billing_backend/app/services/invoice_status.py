"""Invoice status lifecycle."""

from datetime import datetime
from enum import Enum

from billing_backend.app.core.exceptions import InvalidStateTransition, ValidationError
from billing_backend.app.core.time import utc_now


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({InvoiceStatus.SENT, InvoiceStatus.APPROVED, InvoiceStatus.CANCELLED}),
    InvoiceStatus.SENT: frozenset(
        {InvoiceStatus.APPROVED, InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED}
    ),
    InvoiceStatus.OVERDUE: frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED}),
    InvoiceStatus.APPROVED: frozenset({InvoiceStatus.CANCELLED}),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.CANCELLED: frozenset(),
}


def parse_status(value) -> InvoiceStatus:
    try:
        return InvoiceStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown invoice status: {value}", field="status")


def can_transition(current, target) -> bool:
    return parse_status(target) in ALLOWED_TRANSITIONS[parse_status(current)]


def is_editable(status) -> bool:
    """Customer details, items and rates may only change while the invoice is a draft."""
    return parse_status(status) == InvoiceStatus.DRAFT


def ensure_editable(invoice) -> None:
    if not is_editable(invoice.status):
        raise InvalidStateTransition(f"Invoice is {invoice.status}; only draft invoices can be edited")


def apply_transition(invoice, target, now: datetime | None = None) -> bool:
    """Move ``invoice`` to ``target`` and stamp side-effect timestamps.

    Returns False when the invoice is already in ``target`` (nothing changes).
    """
    current = parse_status(invoice.status)
    target = parse_status(target)
    if current == target:
        return False
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStateTransition(f"Cannot change invoice status from {current.value} to {target.value}")

    moment = now or utc_now()
    invoice.status = target.value
    invoice.updated_at = moment
    if target == InvoiceStatus.PAID:
        invoice.paid_at = moment
    return True
