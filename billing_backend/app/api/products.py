"""Product routes."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from billing_backend.app.db.session import get_db
from billing_backend.app.dependencies.auth import get_current_user
from billing_backend.app.models.user import User
from billing_backend.app.schemas.price_history import PriceHistoryRead
from billing_backend.app.schemas.product import ProductRead, ProductUpdate
from billing_backend.app.services import products as product_service

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/{product_id}", response_model=ProductRead)
async def get_product(product_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return product_service.get_owned_product(db, product_id, current_user.id)


@router.patch("/{product_id}", response_model=ProductRead)
async def update_product(
    product_id: int,
    product_in: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = product_service.get_owned_product(db, product_id, current_user.id)
    return product_service.update_product(db, product, product_in, changed_by=current_user.email)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    product = product_service.get_owned_product(db, product_id, current_user.id)
    product_service.delete_product(db, product)


@router.get("/{product_id}/price-history", response_model=List[PriceHistoryRead])
async def price_history(product_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    product = product_service.get_owned_product(db, product_id, current_user.id)
    return product_service.get_price_history(db, product.id)
