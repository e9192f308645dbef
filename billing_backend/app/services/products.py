"""Product catalog and price history."""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from billing_backend.app.core.exceptions import NotFoundError, ValidationError
from billing_backend.app.core.logging import get_logger
from billing_backend.app.core.money import quantize_amount, to_decimal
from billing_backend.app.core.time import utc_now
from billing_backend.app.db.repository import Repository
from billing_backend.app.models.business import Business
from billing_backend.app.models.price_history import PriceHistory
from billing_backend.app.models.product import Product
from billing_backend.app.schemas.product import ProductCreate, ProductUpdate
from billing_backend.app.services.validation import require_text

logger = get_logger(__name__)

products = Repository(Product)
price_history = Repository(PriceHistory)

DEFAULT_PRICE_REASON = "Price update"


def _check_price(value) -> Decimal:
    price = to_decimal(value)
    if not price.is_finite() or price <= 0:
        raise ValidationError("Valid price is required", field="price")
    return quantize_amount(price)


def create_product(db: Session, business: Business, payload: ProductCreate) -> Product:
    record = payload.model_dump()
    record["business_id"] = business.id
    record["name"] = require_text(payload.name, "Product name is required", "name")
    record["price"] = _check_price(payload.price)
    product = products.insert(db, record)
    db.commit()
    db.refresh(product)
    return product


def list_products(db: Session, business_id: int, active_only: bool = False) -> List[Product]:
    items = products.query_by_field(db, "business_id", business_id, order_by="-created_at")
    if active_only:
        items = [product for product in items if product.is_active]
    return items


def get_owned_product(db: Session, product_id: int, owner_id: int) -> Product:
    product = products.get_by_id(db, product_id)
    if product is None or product.business.owner_id != owner_id:
        raise NotFoundError("Product", product_id)
    return product


def update_product(db: Session, product: Product, payload: ProductUpdate, changed_by: str) -> Product:
    """Apply field changes; a new price also appends one price-history entry.

    Both writes commit in a single transaction.
    """
    data = payload.model_dump(exclude_unset=True, exclude={"reason", "expected_version", "price"})
    if "name" in data:
        data["name"] = require_text(data["name"], "Product name is required", "name")

    history: Optional[PriceHistory] = None
    if payload.price is not None:
        new_price = _check_price(payload.price)
        old_price = to_decimal(product.price)
        if new_price != old_price:
            data["price"] = new_price
            history = PriceHistory(
                product_id=product.id,
                old_price=old_price,
                new_price=new_price,
                changed_at=utc_now(),
                changed_by=changed_by,
                reason=payload.reason or DEFAULT_PRICE_REASON,
            )
    data["updated_at"] = utc_now()

    try:
        products.update(db, product, data, expected_version=payload.expected_version)
        if history is not None:
            db.add(history)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(product)

    if history is not None:
        logger.info(
            "product_price_changed",
            product_id=product.id,
            old_price=str(history.old_price),
            new_price=str(history.new_price),
            changed_by=changed_by,
        )
    return product


def delete_product(db: Session, product: Product) -> None:
    products.delete(db, product)
    db.commit()


def get_price_history(db: Session, product_id: int) -> List[PriceHistory]:
    return price_history.query_by_field(db, "product_id", product_id, order_by="-changed_at")
