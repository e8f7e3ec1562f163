"""
ORM listeners that keep ledger entries append-only.

A StockMovement can be inserted once; any later change to one of its
columns flushed through the ORM raises ImmutableRecordError before SQL
reaches the database, and the surrounding transaction is rolled back by
the caller.

    from stockroom.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # idempotent
"""

from sqlalchemy import event, inspect

from ..core.errors import ImmutableRecordError
from .models import StockMovement


def _check_movement_immutability(mapper, connection, target):
    state = inspect(target)
    changed = [
        prop.key
        for prop in mapper.column_attrs
        if state.attrs[prop.key].history.has_changes()
    ]
    if changed:
        raise ImmutableRecordError("StockMovement", target.id)


def register_immutability_listeners() -> None:
    if not event.contains(StockMovement, "before_update", _check_movement_immutability):
        event.listen(StockMovement, "before_update", _check_movement_immutability)
