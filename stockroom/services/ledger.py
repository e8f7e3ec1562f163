"""
Stock ledger engine.

register_movement() applies one IN/OUT adjustment as a single transaction:

    UPDATE stock SET quantity = quantity + :delta
     WHERE product_id = :pid AND quantity + :delta >= 0
    RETURNING quantity

followed by the INSERT of the matching stock_movements row, then COMMIT.
The guarded UPDATE is the only read of the current quantity, so it holds
the row lock (PostgreSQL) or the database write lock (SQLite) from the
read until commit. Movements on the same product therefore serialize and
never lose updates; movements on different products touch different rows.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import (
    InsufficientStockError,
    NotFoundError,
    StockroomError,
    StorageError,
    ValidationError,
)
from ..db.models import StockMovement, StockRecord

logger = logging.getLogger(__name__)


class MovementDirection(str, Enum):
    IN = "IN"
    OUT = "OUT"


DEFAULT_REASONS = {
    MovementDirection.IN: "Stock entry",
    MovementDirection.OUT: "Stock exit",
}


@dataclass(frozen=True)
class MovementResult:
    product_id: int
    movement_id: int
    movement_type: MovementDirection
    previous_quantity: int
    new_quantity: int

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "movement_id": self.movement_id,
            "movement_type": self.movement_type.value,
            "previous_quantity": self.previous_quantity,
            "new_quantity": self.new_quantity,
        }


def _validate(product_id, direction, quantity) -> MovementDirection:
    if isinstance(product_id, bool) or not isinstance(product_id, int) or product_id <= 0:
        raise ValidationError("Valid product_id and positive quantity are required")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("Valid product_id and positive quantity are required")
    try:
        return MovementDirection(direction)
    except ValueError:
        raise ValidationError(f"Unknown movement direction: {direction!r}")


async def register_movement(
    db: AsyncSession,
    *,
    product_id: int,
    direction: MovementDirection | str,
    quantity: int,
    reason: Optional[str] = None,
) -> MovementResult:
    direction = _validate(product_id, direction, quantity)
    delta = quantity if direction is MovementDirection.IN else -quantity
    reason = (reason or "").strip() or DEFAULT_REASONS[direction]

    try:
        stmt = (
            update(StockRecord)
            .where(StockRecord.product_id == product_id)
            .where(StockRecord.quantity + delta >= 0)
            .values(quantity=StockRecord.quantity + delta)
            .returning(StockRecord.quantity)
            .execution_options(synchronize_session=False)
        )
        new_quantity = (await db.execute(stmt)).scalar_one_or_none()

        if new_quantity is None:
            res = await db.execute(
                select(StockRecord.quantity).where(StockRecord.product_id == product_id)
            )
            current = res.scalar_one_or_none()
            if current is None:
                raise NotFoundError("Product not found")
            raise InsufficientStockError(available=int(current), requested=quantity)

        previous_quantity = int(new_quantity) - delta
        movement = StockMovement(
            product_id=product_id,
            movement_type=direction.value,
            quantity=quantity,
            reason=reason,
            previous_quantity=previous_quantity,
            new_quantity=int(new_quantity),
        )
        db.add(movement)
        await db.flush()
        movement_id = movement.id

        await db.commit()
    except InsufficientStockError as e:
        await db.rollback()
        logger.warning(
            "Rejected %s movement for product %s: available=%s requested=%s",
            direction.value, product_id, e.available, e.requested,
        )
        raise
    except StockroomError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Stock %s movement for product %s failed", direction.value, product_id)
        raise StorageError("Failed to register stock movement") from e

    logger.info(
        "Registered %s movement for product %s: %s -> %s",
        direction.value, product_id, previous_quantity, new_quantity,
    )
    return MovementResult(
        product_id=product_id,
        movement_id=movement_id,
        movement_type=direction,
        previous_quantity=previous_quantity,
        new_quantity=int(new_quantity),
    )
