"""Printable HTML and plain-text renderings of an invoice.

The HTML uses inline styles only so the same markup works as an email body,
as a print view, and as input to the HTML-to-PDF renderer.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from billing_backend.app.core.money import format_currency, to_decimal
from billing_backend.app.models.business import Business
from billing_backend.app.models.invoice import Invoice

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

DEFAULT_HEADERS = {
    "item": "Item",
    "description": "Description",
    "quantity": "Quantity",
    "price": "Unit Price",
}


def column_headers(invoice: Invoice) -> dict:
    headers = dict(DEFAULT_HEADERS)
    configured = ((invoice.preferences or {}).get("column_headers")) or {}
    for key in headers:
        if configured.get(key):
            headers[key] = configured[key]
    return headers


def format_date(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")


def format_rate(rate) -> str:
    value = to_decimal(rate).normalize()
    return f"{value:f}"


def _address_line(address: Optional[dict]) -> str:
    if not address or not address.get("street"):
        return ""
    return (
        f"{address.get('street', '')}, {address.get('city') or ''}, "
        f"{address.get('state') or ''} {address.get('zip_code') or ''}"
    ).strip()


templates = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
templates.filters["currency"] = format_currency
templates.filters["date"] = format_date
templates.filters["rate"] = format_rate


def render_to_string(template_name: str, context: dict) -> str:
    return templates.get_template(template_name).render(**context)


def invoice_context(invoice: Invoice, business: Business, message: Optional[str] = None, logo_url: Optional[str] = None) -> dict:
    return {
        "invoice": invoice,
        "business": business,
        "currency": business.currency,
        "headers": column_headers(invoice),
        "logo": logo_url if logo_url is not None else business.logo,
        "business_address": _address_line(business.address),
        "customer_address": invoice.customer_address or {},
        "has_discount": to_decimal(invoice.discount_rate) > 0,
        "has_tax": to_decimal(invoice.tax_rate) > 0,
        "amount_after_discount": to_decimal(invoice.subtotal) - to_decimal(invoice.discount_amount),
        "message": message,
    }


def render_invoice_html(
    invoice: Invoice, business: Business, logo_url: Optional[str] = None, message: Optional[str] = None
) -> str:
    return render_to_string("invoice.html", invoice_context(invoice, business, message=message, logo_url=logo_url))


def render_invoice_text(invoice: Invoice, business: Business, message: Optional[str] = None) -> str:
    return render_to_string("invoice.txt", invoice_context(invoice, business, message=message))


def default_subject(invoice: Invoice, business: Business) -> str:
    return f"Invoice {invoice.invoice_number} - {business.name}"
