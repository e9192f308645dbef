"""Business routes, plus the products, invoices and income scoped to one business."""

from typing import List

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from billing_backend.app.db.session import get_db
from billing_backend.app.models.user import User
from billing_backend.app.dependencies.auth import get_current_user
from billing_backend.app.schemas.business import BusinessCreate, BusinessRead, BusinessUpdate, LogoUploadResult
from billing_backend.app.schemas.income import IncomeRead
from billing_backend.app.schemas.invoice import InvoiceCreate, InvoiceRead
from billing_backend.app.schemas.product import ProductCreate, ProductRead
from billing_backend.app.services import businesses as business_service
from billing_backend.app.services import invoices as invoice_service
from billing_backend.app.services import products as product_service
from billing_backend.app.services.income import get_business_income
from billing_backend.app.services.storage import LocalLogoStorage, get_storage

router = APIRouter(prefix="/businesses", tags=["businesses"])


@router.post("/", response_model=BusinessRead, status_code=status.HTTP_201_CREATED)
async def create_business(
    business_in: BusinessCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return business_service.create_business(db, current_user.id, business_in)


@router.get("/", response_model=List[BusinessRead])
async def list_businesses(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return business_service.list_businesses(db, current_user.id)


@router.get("/{business_id}", response_model=BusinessRead)
async def get_business(business_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return business_service.get_owned_business(db, business_id, current_user.id)


@router.patch("/{business_id}", response_model=BusinessRead)
async def update_business(
    business_id: int,
    business_in: BusinessUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    business = business_service.get_owned_business(db, business_id, current_user.id)
    return business_service.update_business(db, business, business_in)


@router.post("/{business_id}/logo", response_model=LogoUploadResult)
async def upload_logo(
    business_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: LocalLogoStorage = Depends(get_storage),
):
    business = business_service.get_owned_business(db, business_id, current_user.id)
    content = await file.read()
    stored = storage.upload(business.id, file.filename, content, file.content_type)
    business_service.set_logo(db, business, stored.url)
    return LogoUploadResult(success=True, url=stored.url, path=stored.path)


@router.get("/{business_id}/income", response_model=IncomeRead)
async def business_income(business_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    business = business_service.get_owned_business(db, business_id, current_user.id)
    summary = get_business_income(db, business)
    return IncomeRead(
        total_income=summary.total_income,
        current_month_income=summary.current_month_income,
        current_year_income=summary.current_year_income,
        currency=business.currency,
    )


@router.post("/{business_id}/products", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
async def create_product(
    business_id: int,
    product_in: ProductCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    business = business_service.get_owned_business(db, business_id, current_user.id)
    return product_service.create_product(db, business, product_in)


@router.get("/{business_id}/products", response_model=List[ProductRead])
async def list_products(
    business_id: int,
    active_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    business = business_service.get_owned_business(db, business_id, current_user.id)
    return product_service.list_products(db, business.id, active_only=active_only)


@router.post("/{business_id}/invoices", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    business_id: int,
    invoice_in: InvoiceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    business = business_service.get_owned_business(db, business_id, current_user.id)
    return invoice_service.create_invoice(db, business, invoice_in)


@router.get("/{business_id}/invoices", response_model=List[InvoiceRead])
async def list_business_invoices(
    business_id: int,
    status: str | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    business = business_service.get_owned_business(db, business_id, current_user.id)
    return invoice_service.list_invoices(db, current_user.id, business_id=business.id, status=status, search=search)
