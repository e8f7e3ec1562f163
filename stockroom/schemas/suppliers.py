from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_serializer, field_validator

from .stock import INT4_MAX


SupplierStatus = Literal["ACTIVE", "INACTIVE"]


def _strip_or_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


class SupplierRead(BaseModel):
    id: int
    name: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    status: SupplierStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SupplierCreate(BaseModel):
    name: str
    contact_person: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    status: Optional[SupplierStatus] = None

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Supplier name is required")
        return v

    @field_validator("email", "contact_person", "phone", "address", "city", "country", mode="before")
    @classmethod
    def _strip_nullable(cls, v):
        if isinstance(v, str):
            return _strip_or_none(v)
        return v


class SupplierUpdate(BaseModel):
    name: Optional[str] = None
    contact_person: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    status: Optional[SupplierStatus] = None

    @field_validator("name")
    @classmethod
    def _strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty")
        return v

    @field_validator("email", "contact_person", "phone", "address", "city", "country", mode="before")
    @classmethod
    def _strip_nullable(cls, v):
        if isinstance(v, str):
            return _strip_or_none(v)
        return v


class ProductSupplierCreate(BaseModel):
    product_id: int = Field(gt=0, le=INT4_MAX)
    cost_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    is_primary: bool = False


class SupplierProductRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    sku: str
    price: Decimal
    category: Optional[str] = None
    cost_price: Optional[Decimal] = None
    is_primary: bool = False

    @field_serializer("price", "cost_price")
    def _money_as_number(self, v: Optional[Decimal]) -> Optional[float]:
        return float(v) if v is not None else None
