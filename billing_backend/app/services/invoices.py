"""Invoice creation, editing, item operations and status changes."""

import re
from typing import Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from billing_backend.app.core.exceptions import ConflictError, NotFoundError, ValidationError
from billing_backend.app.core.logging import get_logger
from billing_backend.app.core.money import quantize_amount, to_decimal
from billing_backend.app.core.settings import get_settings
from billing_backend.app.core.time import utc_now
from billing_backend.app.db.repository import Repository
from billing_backend.app.models.business import Business
from billing_backend.app.models.invoice import Invoice
from billing_backend.app.models.invoice_item import InvoiceItem
from billing_backend.app.models.product import Product
from billing_backend.app.schemas.invoice import InvoiceCreate, InvoiceUpdate
from billing_backend.app.schemas.invoice_item import LineItemIn
from billing_backend.app.services import line_items
from billing_backend.app.services.invoice_status import InvoiceStatus, apply_transition, ensure_editable, parse_status
from billing_backend.app.services.line_items import Custom, LineItem, ProductBacked
from billing_backend.app.services.totals import calculate_totals, validate_rate
from billing_backend.app.services.validation import optional_email, require_text

logger = get_logger(__name__)

invoices = Repository(Invoice)

# Fields that may only change while the invoice is a draft.
LOCKED_FIELDS = frozenset(
    {"customer_name", "customer_email", "customer_phone", "customer_address", "items", "discount_rate", "tax_rate"}
)

_NUMBER_SUFFIX = re.compile(r"(\d+)$")


def generate_invoice_number(db: Session, business_id: int, prefix: Optional[str] = None) -> str:
    prefix = prefix or get_settings().invoice_number_prefix
    highest = 0
    numbers = db.query(Invoice.invoice_number).filter(Invoice.business_id == business_id).all()
    for (number,) in numbers:
        match = _NUMBER_SUFFIX.search(number or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}-{highest + 1:06d}"


def _catalog_product(db: Session, business: Business, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None or product.business_id != business.id:
        raise NotFoundError("Product", product_id)
    if not product.is_active:
        raise ValidationError("Product is not active", field="product_id")
    return product


def build_items(db: Session, business: Business, rows: Iterable[LineItemIn]) -> List[LineItem]:
    items: List[LineItem] = []
    for row in rows:
        product = _catalog_product(db, business, row.product_id) if row.product_id is not None else None
        line_items.add_item(items, product)
        index = len(items) - 1
        if row.name is not None:
            line_items.update_item(items, index, "name", row.name)
        if row.description is not None:
            line_items.update_item(items, index, "description", row.description)
        if row.unit_price is not None:
            line_items.update_item(items, index, "unit_price", row.unit_price)
        line_items.update_item(items, index, "quantity", row.quantity)
    return items


def load_items(invoice: Invoice) -> List[LineItem]:
    items = []
    for row in invoice.items:
        if row.kind == ProductBacked.kind:
            source = ProductBacked(product_id=row.product_id, name=row.name, description=row.description)
        else:
            source = Custom(name=row.name, description=row.description)
        items.append(LineItem(source=source, quantity=row.quantity, unit_price=to_decimal(row.unit_price)))
    return items


def _store_items(invoice: Invoice, items: List[LineItem], currency: str) -> List:
    rows = []
    for position, item in enumerate(items):
        unit_price = quantize_amount(item.unit_price, currency)
        rows.append(
            InvoiceItem(
                position=position,
                kind=item.source.kind,
                product_id=item.product_id,
                name=item.name or "",
                description=item.description,
                quantity=item.quantity,
                unit_price=unit_price,
                line_total=quantize_amount(item.quantity * unit_price, currency),
            )
        )
    invoice.items = rows
    return [row.line_total for row in rows]


def _apply_totals(invoice: Invoice, line_totals: list, discount_rate, tax_rate, currency: str) -> None:
    totals = calculate_totals(line_totals, discount_rate=discount_rate, tax_rate=tax_rate, currency=currency)
    for field, value in totals.as_dict().items():
        setattr(invoice, field, value)


def create_invoice(db: Session, business: Business, payload: InvoiceCreate) -> Invoice:
    customer_name = require_text(payload.customer_name, "Customer name is required", "customer_name")
    customer_email = optional_email(payload.customer_email, "customer_email")
    if not payload.items:
        raise ValidationError("At least one item is required", field="items")
    discount_rate = validate_rate(payload.discount_rate, "discount_rate")
    tax_rate = validate_rate(payload.tax_rate, "tax_rate")
    items = build_items(db, business, payload.items)

    invoice = Invoice(
        business_id=business.id,
        invoice_number=(payload.invoice_number or "").strip() or generate_invoice_number(db, business.id),
        customer_name=customer_name,
        customer_email=customer_email,
        customer_phone=payload.customer_phone,
        customer_address=payload.customer_address.model_dump() if payload.customer_address else None,
        status=InvoiceStatus.DRAFT.value,
        invoice_date=payload.invoice_date or utc_now(),
        due_date=payload.due_date,
        notes=payload.notes,
        preferences=payload.preferences.model_dump() if payload.preferences else None,
    )
    line_totals = _store_items(invoice, items, business.currency)
    _apply_totals(invoice, line_totals, discount_rate, tax_rate, business.currency)

    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    logger.info("invoice_created", invoice_id=invoice.id, invoice_number=invoice.invoice_number)
    return invoice


def list_invoices(
    db: Session,
    owner_id: int,
    business_id: Optional[int] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Invoice]:
    query = db.query(Invoice).join(Business, Invoice.business_id == Business.id).filter(Business.owner_id == owner_id)
    if business_id is not None:
        query = query.filter(Invoice.business_id == business_id)
    if status:
        query = query.filter(Invoice.status == parse_status(status).value)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Invoice.invoice_number.ilike(pattern), Invoice.customer_name.ilike(pattern)))
    return query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()


def get_owned_invoice(db: Session, invoice_id: int, owner_id: int) -> Invoice:
    invoice = invoices.get_by_id(db, invoice_id)
    if invoice is None or invoice.business.owner_id != owner_id:
        raise NotFoundError("Invoice", invoice_id)
    return invoice


def update_invoice(db: Session, invoice: Invoice, payload: InvoiceUpdate) -> Invoice:
    data = payload.model_dump(exclude_unset=True, exclude={"expected_version"})
    if LOCKED_FIELDS & data.keys():
        ensure_editable(invoice)
    if payload.expected_version is not None and invoice.version != payload.expected_version:
        raise ConflictError()

    currency = invoice.business.currency
    changes = {}
    if "customer_name" in data:
        changes["customer_name"] = require_text(data["customer_name"], "Customer name is required", "customer_name")
    if "customer_email" in data:
        changes["customer_email"] = optional_email(data["customer_email"], "customer_email")
    if "customer_phone" in data:
        changes["customer_phone"] = data["customer_phone"]
    if "customer_address" in data:
        changes["customer_address"] = payload.customer_address.model_dump() if payload.customer_address else None
    if "preferences" in data:
        changes["preferences"] = payload.preferences.model_dump() if payload.preferences else None
    for field in ("due_date", "notes"):
        if field in data:
            changes[field] = data[field]

    discount_rate = invoice.discount_rate if payload.discount_rate is None else payload.discount_rate
    tax_rate = invoice.tax_rate if payload.tax_rate is None else payload.tax_rate
    discount_rate = validate_rate(discount_rate, "discount_rate")
    tax_rate = validate_rate(tax_rate, "tax_rate")

    if "items" in data:
        if not payload.items:
            raise ValidationError("At least one item is required", field="items")
        line_totals = _store_items(invoice, build_items(db, invoice.business, payload.items), currency)
    else:
        line_totals = [row.line_total for row in invoice.items]
    _apply_totals(invoice, line_totals, discount_rate, tax_rate, currency)

    changes["updated_at"] = utc_now()
    invoices.update(db, invoice, changes)
    db.commit()
    db.refresh(invoice)
    return invoice


def _save_items(db: Session, invoice: Invoice, items: List[LineItem]) -> Invoice:
    currency = invoice.business.currency
    line_totals = _store_items(invoice, items, currency)
    _apply_totals(invoice, line_totals, invoice.discount_rate, invoice.tax_rate, currency)
    invoice.updated_at = utc_now()
    db.commit()
    db.refresh(invoice)
    return invoice


def add_invoice_item(db: Session, invoice: Invoice, product_id: Optional[int] = None) -> Invoice:
    ensure_editable(invoice)
    product = _catalog_product(db, invoice.business, product_id) if product_id is not None else None
    items = load_items(invoice)
    line_items.add_item(items, product)
    return _save_items(db, invoice, items)


def update_invoice_item(db: Session, invoice: Invoice, index: int, field: str, value) -> Invoice:
    ensure_editable(invoice)
    items = load_items(invoice)
    if field == "product_id":
        if value is None:
            raise ValidationError("Product is required", field="product_id")
        try:
            product_id = int(value)
        except (TypeError, ValueError):
            raise ValidationError("Product is required", field="product_id")
        line_items.update_item(items, index, "product", _catalog_product(db, invoice.business, product_id))
    else:
        line_items.update_item(items, index, field, value)
    return _save_items(db, invoice, items)


def remove_invoice_item(db: Session, invoice: Invoice, index: int) -> Invoice:
    ensure_editable(invoice)
    items = load_items(invoice)
    line_items.remove_item(items, index)
    if not items:
        raise ValidationError("At least one item is required", field="items")
    return _save_items(db, invoice, items)


def change_status(db: Session, invoice: Invoice, target) -> Invoice:
    previous = invoice.status
    if apply_transition(invoice, target):
        db.commit()
        db.refresh(invoice)
        logger.info("invoice_status_changed", invoice_id=invoice.id, previous=previous, status=invoice.status)
    return invoice


def approve_invoice(db: Session, invoice: Invoice) -> Invoice:
    return change_status(db, invoice, InvoiceStatus.APPROVED)


def mark_sent(db: Session, invoice: Invoice) -> Invoice:
    """After a successful email, a draft becomes sent; other statuses stay put."""
    if invoice.status == InvoiceStatus.DRAFT.value:
        return change_status(db, invoice, InvoiceStatus.SENT)
    return invoice


def delete_invoice(db: Session, invoice: Invoice) -> None:
    invoices.delete(db, invoice)
    db.commit()
