"""Business schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from billing_backend.app.schemas.address import Address


class BusinessBase(BaseModel):
    name: str
    address: Address = Field(default_factory=Address)
    phone: str = ""
    email: str = ""
    description: Optional[str] = None


class BusinessCreate(BusinessBase):
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    logo: Optional[str] = None


class BusinessUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[Address] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    logo: Optional[str] = None
    expected_version: Optional[int] = None


class BusinessRead(BusinessBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    currency: str
    logo: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: datetime


class LogoUploadResult(BaseModel):
    success: bool = True
    url: str
    path: str
