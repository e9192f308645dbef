"""Append-only audit log of product price changes."""

from sqlalchemy import Column, DateTime, Integer, Numeric, String

from billing_backend.app.core.time import utc_now
from billing_backend.app.db.base_class import Base


class PriceHistory(Base):
    __tablename__ = "price_history"

    id = Column(Integer, primary_key=True, index=True)
    # Plain column rather than a foreign key: entries outlive their product.
    product_id = Column(Integer, nullable=False, index=True)
    old_price = Column(Numeric(12, 2), nullable=False)
    new_price = Column(Numeric(12, 2), nullable=False)
    changed_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    changed_by = Column(String(255), nullable=False)
    reason = Column(String(255), nullable=True)
