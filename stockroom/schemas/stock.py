from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from ..services.status import StockStatus


MovementType = Literal["IN", "OUT"]

# Largest value an INTEGER column holds on PostgreSQL
INT4_MAX = 2_147_483_647


class StockMovementRequest(BaseModel):
    """Body of POST /api/stock/in and POST /api/stock/out."""
    product_id: int = Field(gt=0, le=INT4_MAX)
    quantity: int = Field(gt=0, le=INT4_MAX)
    reason: Optional[str] = None

    @field_validator("reason")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class MovementResultOut(BaseModel):
    product_id: int
    movement_id: int
    movement_type: MovementType
    previous_quantity: int
    new_quantity: int


class StockOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    min_stock: int
    max_stock: int
    updated_at: Optional[datetime] = None
    product_name: str
    sku: str
    price: Decimal
    status: StockStatus

    @field_serializer("price")
    def _price_as_number(self, v: Decimal) -> float:
        return float(v)


class StockMovementOut(BaseModel):
    id: int
    product_id: int
    movement_type: MovementType
    quantity: int
    reason: Optional[str] = None
    previous_quantity: int
    new_quantity: int
    created_at: Optional[datetime] = None
    product_name: str
    sku: str
