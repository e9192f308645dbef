"""Income totals across all of a user's businesses, and the dashboard summary."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from billing_backend.app.db.session import get_db
from billing_backend.app.dependencies.auth import get_current_user
from billing_backend.app.models.user import User
from billing_backend.app.schemas.income import DashboardRead, IncomeRead
from billing_backend.app.services.income import IncomeSummary, get_dashboard, get_user_income

router = APIRouter(tags=["income"])


def _income_read(summary: IncomeSummary) -> IncomeRead:
    return IncomeRead(
        total_income=summary.total_income,
        current_month_income=summary.current_month_income,
        current_year_income=summary.current_year_income,
    )


@router.get("/income", response_model=IncomeRead)
async def user_income(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _income_read(get_user_income(db, current_user.id))


@router.get("/dashboard", response_model=DashboardRead)
async def dashboard(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    data = get_dashboard(db, current_user.id)
    return DashboardRead(
        business_count=data["business_count"],
        product_count=data["product_count"],
        income=_income_read(data["income"]),
    )
