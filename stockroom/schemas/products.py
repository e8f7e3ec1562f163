from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator


PriceValue = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]


class ProductRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    sku: str
    price: Decimal
    category: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_serializer("price")
    def _price_as_number(self, v: Decimal) -> float:
        return float(v)


class ProductCreate(BaseModel):
    name: str
    description: Optional[str] = None
    sku: str
    price: PriceValue
    category: Optional[str] = None

    @field_validator("name", "sku")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("description", "category")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    sku: Optional[str] = None
    price: Optional[PriceValue] = None
    category: Optional[str] = None

    @field_validator("name", "sku")
    @classmethod
    def _strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty")
        return v

    @field_validator("description", "category")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None
