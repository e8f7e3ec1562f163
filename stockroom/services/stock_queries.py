"""Read-only queries over stock records and the movement ledger."""

from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import Product, StockMovement, StockRecord
from .status import classify_stock

MOVEMENT_HISTORY_LIMIT = 100


def _stock_row(st: StockRecord, p: Product) -> Dict:
    return {
        "id": st.id,
        "product_id": st.product_id,
        "quantity": int(st.quantity),
        "min_stock": int(st.min_stock),
        "max_stock": int(st.max_stock),
        "updated_at": st.updated_at,
        "product_name": p.name,
        "sku": p.sku,
        "price": p.price,
        "status": classify_stock(st.quantity, st.min_stock, st.max_stock).value,
    }


async def list_stock(db: AsyncSession) -> List[Dict]:
    stmt = (
        select(StockRecord, Product)
        .join(Product, StockRecord.product_id == Product.id)
        .order_by(Product.name.asc(), Product.id.asc())
    )
    res = await db.execute(stmt)
    return [_stock_row(st, p) for (st, p) in res.all()]


async def get_stock_for_product(db: AsyncSession, product_id: int) -> Optional[Dict]:
    stmt = (
        select(StockRecord, Product)
        .join(Product, StockRecord.product_id == Product.id)
        .where(StockRecord.product_id == product_id)
    )
    row = (await db.execute(stmt)).first()
    if row is None:
        return None
    st, p = row
    return _stock_row(st, p)


async def list_low_stock(db: AsyncSession) -> List[Dict]:
    stmt = (
        select(StockRecord, Product)
        .join(Product, StockRecord.product_id == Product.id)
        .where(StockRecord.quantity <= StockRecord.min_stock)
        .order_by(StockRecord.quantity.asc(), Product.name.asc())
    )
    res = await db.execute(stmt)
    return [_stock_row(st, p) for (st, p) in res.all()]


async def list_movements(
    db: AsyncSession,
    product_id: Optional[int] = None,
    limit: int = MOVEMENT_HISTORY_LIMIT,
) -> List[Dict]:
    """Newest first, never more than MOVEMENT_HISTORY_LIMIT entries."""
    limit = max(1, min(int(limit), MOVEMENT_HISTORY_LIMIT))
    stmt = select(StockMovement, Product).join(Product, StockMovement.product_id == Product.id)
    if product_id is not None:
        stmt = stmt.where(StockMovement.product_id == product_id)
    # id breaks ties between rows written within the same clock tick
    stmt = stmt.order_by(StockMovement.created_at.desc(), StockMovement.id.desc()).limit(limit)

    res = await db.execute(stmt)
    out = []
    for (mv, p) in res.all():
        out.append(
            {
                "id": mv.id,
                "product_id": mv.product_id,
                "movement_type": mv.movement_type,
                "quantity": int(mv.quantity),
                "reason": mv.reason,
                "previous_quantity": int(mv.previous_quantity),
                "new_quantity": int(mv.new_quantity),
                "created_at": mv.created_at,
                "product_name": p.name,
                "sku": p.sku,
            }
        )
    return out
