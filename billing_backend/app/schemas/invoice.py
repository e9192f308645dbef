"""Invoice schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from billing_backend.app.schemas.address import Address
from billing_backend.app.schemas.invoice_item import LineItemIn, LineItemRead


class ColumnHeaders(BaseModel):
    item: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[str] = None
    price: Optional[str] = None


class InvoicePreferences(BaseModel):
    column_headers: ColumnHeaders = Field(default_factory=ColumnHeaders)


class InvoiceCreate(BaseModel):
    invoice_number: Optional[str] = None
    customer_name: str = ""
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[Address] = None
    items: List[LineItemIn] = Field(default_factory=list)
    discount_rate: Decimal = Decimal("0")
    tax_rate: Decimal = Decimal("0")
    invoice_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    notes: Optional[str] = None
    preferences: Optional[InvoicePreferences] = None


class InvoiceUpdate(BaseModel):
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[Address] = None
    items: Optional[List[LineItemIn]] = None
    discount_rate: Optional[Decimal] = None
    tax_rate: Optional[Decimal] = None
    due_date: Optional[datetime] = None
    notes: Optional[str] = None
    preferences: Optional[InvoicePreferences] = None
    expected_version: Optional[int] = None


class InvoiceStatusChange(BaseModel):
    status: str


class InvoiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    business_id: int
    invoice_number: str

    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[Address] = None

    items: List[LineItemRead]
    subtotal: Decimal
    discount_rate: Decimal
    discount_amount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal

    status: str
    invoice_date: datetime
    due_date: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None
    preferences: Optional[InvoicePreferences] = None

    version: int
    created_at: datetime
    updated_at: datetime
