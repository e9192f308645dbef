"""Price history schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class PriceHistoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    old_price: Decimal
    new_price: Decimal
    changed_at: datetime
    changed_by: str
    reason: Optional[str] = None
