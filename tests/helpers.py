"""Data helpers shared by the test modules."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select

from stockroom.db.database import Database
from stockroom.db.models import Product, StockMovement, StockRecord
from stockroom.services.ledger import MovementDirection, register_movement


async def create_product(
    database: Database,
    sku: str,
    *,
    name: Optional[str] = None,
    price: str = "10.00",
    category: Optional[str] = None,
    quantity: int = 0,
    min_stock: int = 5,
    max_stock: int = 100,
) -> int:
    """Insert a product with its stock record; opening quantity goes through the ledger."""
    async with database.session_maker() as db:
        p = Product(
            name=name or f"Product {sku}",
            sku=sku,
            price=Decimal(price),
            category=category,
            stock=StockRecord(quantity=0, min_stock=min_stock, max_stock=max_stock),
        )
        db.add(p)
        await db.commit()
        product_id = p.id

    if quantity:
        async with database.session_maker() as db:
            await register_movement(
                db,
                product_id=product_id,
                direction=MovementDirection.IN,
                quantity=quantity,
                reason="Opening stock",
            )
    return product_id


async def current_quantity(database: Database, product_id: int) -> Optional[int]:
    async with database.session_maker() as db:
        res = await db.execute(select(StockRecord.quantity).where(StockRecord.product_id == product_id))
        return res.scalar_one_or_none()


async def ledger_balance(database: Database, product_id: int) -> int:
    """Fold of the movement ledger: sum(IN) - sum(OUT)."""
    async with database.session_maker() as db:
        res = await db.execute(
            select(StockMovement.movement_type, func.coalesce(func.sum(StockMovement.quantity), 0))
            .where(StockMovement.product_id == product_id)
            .group_by(StockMovement.movement_type)
        )
        totals = {t: int(q) for (t, q) in res.all()}
    return totals.get("IN", 0) - totals.get("OUT", 0)


async def movement_count(database: Database, product_id: Optional[int] = None) -> int:
    async with database.session_maker() as db:
        stmt = select(func.count(StockMovement.id))
        if product_id is not None:
            stmt = stmt.where(StockMovement.product_id == product_id)
        return (await db.execute(stmt)).scalar_one()
