"""Imports every model so Base.metadata knows all tables."""

from .inventory.movement import StockMovement
from .inventory.stock import StockRecord
from .product import Product
from .product_supplier import ProductSupplier
from .supplier import Supplier

__all__ = ["Product", "ProductSupplier", "StockMovement", "StockRecord", "Supplier"]
