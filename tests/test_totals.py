import random
from decimal import ROUND_HALF_UP, Decimal

import pytest

from billing_backend.app.core.exceptions import ValidationError
from billing_backend.app.services.totals import calculate_totals, validate_rate


def test_discount_then_tax_on_discounted_amount():
    totals = calculate_totals([Decimal("100.00")], discount_rate=10, tax_rate=5)
    assert totals.subtotal == Decimal("100.00")
    assert totals.discount_amount == Decimal("10.00")
    assert totals.amount_after_discount == Decimal("90.00")
    assert totals.tax_amount == Decimal("4.50")
    assert totals.total == Decimal("94.50")


def test_no_items_gives_zero_totals():
    totals = calculate_totals([], discount_rate=10, tax_rate=18)
    assert totals.subtotal == Decimal("0.00")
    assert totals.discount_amount == Decimal("0.00")
    assert totals.tax_amount == Decimal("0.00")
    assert totals.total == Decimal("0.00")


def test_rounding_keeps_total_consistent_with_parts():
    totals = calculate_totals([Decimal("33.33"), Decimal("0.01")], discount_rate="12.5", tax_rate="18")
    assert totals.subtotal == Decimal("33.34")
    assert totals.discount_amount == Decimal("4.17")
    assert totals.tax_amount == Decimal("5.25")
    assert totals.total == totals.subtotal - totals.discount_amount + totals.tax_amount
    assert totals.total == Decimal("34.42")


def test_zero_decimal_currency_rounds_to_whole_units():
    totals = calculate_totals([Decimal("999")], discount_rate=5, tax_rate=10, currency="JPY")
    assert totals.discount_amount == Decimal("50")
    assert totals.tax_amount == Decimal("95")
    assert totals.total == Decimal("1044")


def test_rates_at_bounds_are_accepted():
    totals = calculate_totals([Decimal("20.00")], discount_rate=100, tax_rate=0)
    assert totals.total == Decimal("0.00")


@pytest.mark.parametrize("rate", [-1, "100.01", "abc", "NaN"])
def test_rates_outside_range_are_rejected(rate):
    with pytest.raises(ValidationError) as exc:
        calculate_totals([Decimal("10")], discount_rate=rate)
    assert exc.value.message == "Discount rate must be between 0 and 100"


def test_validate_rate_names_the_field():
    with pytest.raises(ValidationError) as exc:
        validate_rate(101, "tax_rate")
    assert exc.value.details == {"field": "tax_rate"}
    assert exc.value.message == "Tax rate must be between 0 and 100"


def random_invoice(seed):
    rng = random.Random(seed)
    lines = [Decimal(rng.randint(0, 500_000)) / 100 for _ in range(rng.randint(0, 12))]
    discount_rate = Decimal(rng.randint(0, 10_000)) / 100
    tax_rate = Decimal(rng.randint(0, 10_000)) / 100
    return lines, discount_rate, tax_rate


def cents(value):
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@pytest.mark.parametrize("seed", range(200))
def test_totals_identities_hold_for_random_invoices(seed):
    lines, discount_rate, tax_rate = random_invoice(seed)
    totals = calculate_totals(lines, discount_rate=discount_rate, tax_rate=tax_rate)

    assert totals.subtotal == cents(sum(lines, Decimal("0")))
    assert totals.discount_amount == cents(totals.subtotal * discount_rate / 100)
    assert totals.tax_amount == cents((totals.subtotal - totals.discount_amount) * tax_rate / 100)
    assert totals.total == totals.subtotal - totals.discount_amount + totals.tax_amount
    assert Decimal("0") <= totals.discount_amount <= totals.subtotal
    assert totals.tax_amount >= 0


@pytest.mark.parametrize("seed", range(20))
def test_totals_are_deterministic(seed):
    lines, discount_rate, tax_rate = random_invoice(seed)
    first = calculate_totals(lines, discount_rate=discount_rate, tax_rate=tax_rate)
    again = calculate_totals(list(lines), discount_rate=discount_rate, tax_rate=tax_rate)
    assert first == again
