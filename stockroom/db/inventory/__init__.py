"""
Stock ledger storage.

Models:
- StockRecord (current on-hand quantity, one row per product)
- StockMovement (append-only IN/OUT entries with before/after snapshots)

For every product: stock.quantity == sum(IN) - sum(OUT) over its movements.
"""

from .movement import MOVEMENT_TYPES, StockMovement
from .stock import StockRecord

__all__ = [
    "MOVEMENT_TYPES",
    "StockMovement",
    "StockRecord",
]
