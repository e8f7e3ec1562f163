"""Inventory API: products catalog, stock ledger and suppliers services."""

__version__ = "0.1.0"
