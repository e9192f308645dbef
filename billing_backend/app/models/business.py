"""Business (tenant) model."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from billing_backend.app.core.time import utc_now
from billing_backend.app.db.base_class import Base


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    address = Column(JSON, nullable=False, default=dict)
    phone = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    logo = Column(String(512), nullable=True)
    description = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    owner = relationship("User", back_populates="businesses")
    products = relationship("Product", back_populates="business", cascade="all, delete-orphan")
    invoices = relationship("Invoice", back_populates="business", cascade="all, delete-orphan")

    __mapper_args__ = {"version_id_col": version}
