from enum import Enum


class StockStatus(str, Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"


def classify_stock(quantity: int, min_stock: int, max_stock: int) -> StockStatus:
    """LOW at or under min_stock, HIGH at or over max_stock, NORMAL between.

    LOW wins when min_stock >= max_stock (thresholds are not cross-checked).
    """
    if quantity <= min_stock:
        return StockStatus.LOW
    if quantity >= max_stock:
        return StockStatus.HIGH
    return StockStatus.NORMAL
