from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Product(Base):
    """Catalog entry. Name/SKU/price are the truth source for stock listings."""
    __tablename__ = "products"
    __table_args__ = (CheckConstraint("price >= 0", name="ck_products_price_non_negative"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    sku = Column(String(100), nullable=False, unique=True, index=True)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(100), nullable=True, index=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    stock = relationship(
        "StockRecord",
        back_populates="product",
        uselist=False,
        cascade="all, delete-orphan",
    )
    movements = relationship(
        "StockMovement",
        back_populates="product",
        cascade="all, delete-orphan",
    )
    supplier_links = relationship(
        "ProductSupplier",
        back_populates="product",
        cascade="all, delete-orphan",
    )

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "sku": self.sku,
            "price": self.price,
            "category": self.category,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
