"""Editable invoice line items.

A line is either backed by a catalog product (its name, description and price
are a snapshot taken when the product was picked) or a free-text custom line.
``line_total`` is derived from quantity and unit price and never stored apart
from them.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional, Protocol, Union

from billing_backend.app.core.exceptions import ValidationError
from billing_backend.app.core.money import ZERO, to_decimal


class ProductLike(Protocol):
    id: int
    name: str
    description: Optional[str]
    price: Any


@dataclass
class ProductBacked:
    product_id: int
    name: str
    description: Optional[str] = None

    kind = "product"


@dataclass
class Custom:
    name: str = ""
    description: Optional[str] = None

    kind = "custom"


LineSource = Union[ProductBacked, Custom]


@dataclass
class LineItem:
    source: LineSource = field(default_factory=Custom)
    quantity: int = 1
    unit_price: Decimal = ZERO

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.unit_price

    @property
    def is_custom(self) -> bool:
        return isinstance(self.source, Custom)

    @property
    def name(self) -> str:
        return self.source.name

    @property
    def description(self) -> Optional[str]:
        return self.source.description

    @property
    def product_id(self) -> Optional[int]:
        return self.source.product_id if isinstance(self.source, ProductBacked) else None


def snapshot(product: ProductLike) -> ProductBacked:
    return ProductBacked(product_id=product.id, name=product.name, description=product.description)


def _coerce_quantity(value) -> int:
    if isinstance(value, bool):
        raise ValidationError("Quantity must be a whole number", field="quantity")
    try:
        number = to_decimal(value)
    except ArithmeticError:
        raise ValidationError("Quantity must be a whole number", field="quantity")
    if not number.is_finite() or number != number.to_integral_value():
        raise ValidationError("Quantity must be a whole number", field="quantity")
    if number < 0:
        raise ValidationError("Quantity cannot be negative", field="quantity")
    return int(number)


def _coerce_price(value) -> Decimal:
    try:
        price = to_decimal(value)
    except ArithmeticError:
        raise ValidationError("Unit price must be a number", field="unit_price")
    if not price.is_finite():
        raise ValidationError("Unit price must be a number", field="unit_price")
    if price < 0:
        raise ValidationError("Unit price cannot be negative", field="unit_price")
    return price


def add_item(items: list[LineItem], product: Optional[ProductLike] = None) -> LineItem:
    """Append a row: a product snapshot at its current price, or an empty custom row."""
    if product is not None:
        item = LineItem(source=snapshot(product), quantity=1, unit_price=to_decimal(product.price))
    else:
        item = LineItem(source=Custom(), quantity=1, unit_price=ZERO)
    items.append(item)
    return item


def _get(items: list[LineItem], index: int) -> LineItem:
    if index < 0 or index >= len(items):
        raise ValidationError(f"No line item at position {index}", field="index")
    return items[index]


def update_item(items: list[LineItem], index: int, field: str, value) -> LineItem:
    """Change one field of a row.

    ``field`` is one of ``quantity``, ``unit_price``, ``product`` (value is a
    product to re-snapshot from), ``name`` or ``description``.
    """
    item = _get(items, index)

    if field == "quantity":
        item.quantity = _coerce_quantity(value)
    elif field == "unit_price":
        item.unit_price = _coerce_price(value)
    elif field == "product":
        item.source = snapshot(value)
        item.unit_price = to_decimal(value.price)
    elif field == "name":
        name = "" if value is None else str(value)
        if isinstance(item.source, ProductBacked):
            if name != item.source.name:
                item.source = Custom(name=name, description=item.source.description)
        else:
            item.source.name = name
    elif field == "description":
        item.source.description = value
    else:
        raise ValidationError(f"Unknown line item field: {field}", field=field)
    return item


def remove_item(items: list[LineItem], index: int) -> LineItem:
    _get(items, index)
    return items.pop(index)
