from datetime import UTC, datetime
from types import SimpleNamespace

import pytest

from billing_backend.app.core.exceptions import InvalidStateTransition, ValidationError
from billing_backend.app.services.invoice_status import (
    InvoiceStatus,
    apply_transition,
    can_transition,
    ensure_editable,
    is_editable,
)


def make_invoice(status="draft"):
    return SimpleNamespace(status=status, updated_at=None, paid_at=None)


@pytest.mark.parametrize(
    "current,target",
    [
        ("draft", "sent"),
        ("draft", "approved"),
        ("draft", "cancelled"),
        ("sent", "approved"),
        ("sent", "paid"),
        ("sent", "overdue"),
        ("sent", "cancelled"),
        ("overdue", "paid"),
        ("overdue", "cancelled"),
        ("approved", "cancelled"),
    ],
)
def test_allowed_transitions(current, target):
    assert can_transition(current, target)


@pytest.mark.parametrize(
    "current,target",
    [
        ("draft", "paid"),
        ("draft", "overdue"),
        ("approved", "paid"),
        ("paid", "draft"),
        ("paid", "cancelled"),
        ("cancelled", "draft"),
        ("overdue", "sent"),
    ],
)
def test_disallowed_transitions_raise(current, target):
    invoice = make_invoice(current)
    with pytest.raises(InvalidStateTransition):
        apply_transition(invoice, target)
    assert invoice.status == current


def test_paid_sets_paid_at_and_updated_at():
    moment = datetime(2030, 5, 1, tzinfo=UTC)
    invoice = make_invoice("sent")
    assert apply_transition(invoice, InvoiceStatus.PAID, now=moment) is True
    assert invoice.status == "paid"
    assert invoice.paid_at == moment
    assert invoice.updated_at == moment


def test_same_status_is_a_no_op():
    invoice = make_invoice("sent")
    assert apply_transition(invoice, "sent") is False
    assert invoice.updated_at is None


def test_unknown_status_is_a_validation_error():
    with pytest.raises(ValidationError):
        apply_transition(make_invoice(), "archived")


def test_only_drafts_are_editable():
    assert is_editable("draft")
    ensure_editable(make_invoice("draft"))
    for status in ("sent", "approved", "paid", "overdue", "cancelled"):
        assert not is_editable(status)
        with pytest.raises(InvalidStateTransition):
            ensure_editable(make_invoice(status))
