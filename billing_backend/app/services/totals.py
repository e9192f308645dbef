"""Invoice totals: subtotal, discount, tax and grand total."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from billing_backend.app.core.exceptions import ValidationError
from billing_backend.app.core.money import ZERO, quantize_amount, to_decimal

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    discount_rate: Decimal
    discount_amount: Decimal
    amount_after_discount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal

    def as_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "discount_rate": self.discount_rate,
            "discount_amount": self.discount_amount,
            "tax_rate": self.tax_rate,
            "tax_amount": self.tax_amount,
            "total": self.total,
        }


def validate_rate(value, name: str) -> Decimal:
    message = f"{name.replace('_', ' ').capitalize()} must be between 0 and 100"
    try:
        rate = to_decimal(value)
    except ArithmeticError:
        raise ValidationError(message, field=name)
    if not rate.is_finite() or rate < ZERO or rate > HUNDRED:
        raise ValidationError(message, field=name)
    return rate


def calculate_totals(
    line_totals: Iterable,
    discount_rate=ZERO,
    tax_rate=ZERO,
    currency: str | None = None,
) -> InvoiceTotals:
    """Aggregate line totals and apply the discount, then tax on the discounted amount.

    Each derived amount is rounded half-up to the currency's minor unit, and
    the after-discount amount and total are built from the rounded parts, so
    ``total == subtotal - discount_amount + tax_amount`` holds exactly.
    """
    discount_rate = validate_rate(discount_rate, "discount_rate")
    tax_rate = validate_rate(tax_rate, "tax_rate")

    subtotal = quantize_amount(sum((to_decimal(value) for value in line_totals), ZERO), currency)
    discount_amount = quantize_amount(subtotal * discount_rate / HUNDRED, currency)
    amount_after_discount = subtotal - discount_amount
    tax_amount = quantize_amount(amount_after_discount * tax_rate / HUNDRED, currency)
    total = amount_after_discount + tax_amount

    return InvoiceTotals(
        subtotal=subtotal,
        discount_rate=discount_rate,
        discount_amount=discount_amount,
        amount_after_discount=amount_after_discount,
        tax_rate=tax_rate,
        tax_amount=tax_amount,
        total=total,
    )
