"""Product schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ProductBase(BaseModel):
    name: str
    description: Optional[str] = None
    price: Decimal
    category: Optional[str] = None
    sku: Optional[str] = None
    barcode: Optional[str] = None
    image: Optional[str] = None
    is_active: bool = True


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    category: Optional[str] = None
    sku: Optional[str] = None
    barcode: Optional[str] = None
    image: Optional[str] = None
    is_active: Optional[bool] = None
    reason: Optional[str] = None
    expected_version: Optional[int] = None


class ProductRead(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    business_id: int
    version: int
    created_at: datetime
    updated_at: datetime
