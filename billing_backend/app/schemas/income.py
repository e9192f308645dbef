"""Income and dashboard schemas."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class IncomeRead(BaseModel):
    total_income: Decimal
    current_month_income: Decimal
    current_year_income: Decimal
    currency: Optional[str] = None


class DashboardRead(BaseModel):
    business_count: int
    product_count: int
    income: IncomeRead
