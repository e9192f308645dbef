"""Income statistics.

Only invoices whose status is ``approved`` count as income, whatever other
status they might reach later (``paid`` included). Periods are bucketed by
invoice date.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from sqlalchemy.orm import Session

from billing_backend.app.core.money import ZERO, quantize_amount, to_decimal
from billing_backend.app.core.time import as_utc, utc_now
from billing_backend.app.models.business import Business
from billing_backend.app.models.invoice import Invoice
from billing_backend.app.models.product import Product
from billing_backend.app.services.invoice_status import InvoiceStatus


@dataclass(frozen=True)
class IncomeSummary:
    total_income: Decimal
    current_month_income: Decimal
    current_year_income: Decimal


def summarize_income(invoices: Iterable, now: datetime | None = None, currency: str | None = None) -> IncomeSummary:
    now = as_utc(now or utc_now())
    total = month = year = ZERO

    for invoice in invoices:
        if invoice.status != InvoiceStatus.APPROVED.value:
            continue
        amount = to_decimal(invoice.total)
        total += amount
        invoice_date = invoice.invoice_date or invoice.created_at
        if invoice_date is None:
            continue
        invoice_date = as_utc(invoice_date)
        if invoice_date.year == now.year:
            year += amount
            if invoice_date.month == now.month:
                month += amount

    return IncomeSummary(
        total_income=quantize_amount(total, currency),
        current_month_income=quantize_amount(month, currency),
        current_year_income=quantize_amount(year, currency),
    )


def get_business_income(db: Session, business: Business, now: datetime | None = None) -> IncomeSummary:
    invoices = (
        db.query(Invoice)
        .filter(Invoice.business_id == business.id, Invoice.status == InvoiceStatus.APPROVED.value)
        .all()
    )
    return summarize_income(invoices, now=now, currency=business.currency)


def get_user_income(db: Session, owner_id: int, now: datetime | None = None) -> IncomeSummary:
    invoices = (
        db.query(Invoice)
        .join(Business, Invoice.business_id == Business.id)
        .filter(Business.owner_id == owner_id, Invoice.status == InvoiceStatus.APPROVED.value)
        .all()
    )
    return summarize_income(invoices, now=now)


def get_dashboard(db: Session, owner_id: int, now: datetime | None = None) -> dict:
    business_ids = [row.id for row in db.query(Business.id).filter(Business.owner_id == owner_id).all()]
    product_count = 0
    if business_ids:
        product_count = db.query(Product).filter(Product.business_id.in_(business_ids)).count()
    return {
        "business_count": len(business_ids),
        "product_count": product_count,
        "income": get_user_income(db, owner_id, now=now),
    }
