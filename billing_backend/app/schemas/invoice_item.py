"""Invoice line item schemas."""

from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class LineItemIn(BaseModel):
    """A line on a create/update request.

    With ``product_id`` the line starts as a snapshot of that product; a
    ``name`` that differs from the product's turns it into a custom line.
    """

    product_id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    quantity: int = 1
    unit_price: Optional[Decimal] = Field(default=None, decimal_places=2)


class LineItemAdd(BaseModel):
    product_id: Optional[int] = None


class LineItemFieldUpdate(BaseModel):
    field: Literal["quantity", "unit_price", "product_id", "name", "description"]
    value: Any = None


class LineItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    position: int
    kind: str
    product_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    is_custom: bool
