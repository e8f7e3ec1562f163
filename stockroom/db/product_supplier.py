from sqlalchemy import Boolean, Column, ForeignKey, Integer, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship

from .database import Base


class ProductSupplier(Base):
    """Association object between Product and Supplier.
    Stores the supplier's cost price and whether it is the primary source."""
    __tablename__ = "product_suppliers"
    __table_args__ = (
        UniqueConstraint("product_id", "supplier_id", name="ux_product_suppliers_product_supplier"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="CASCADE"), nullable=False, index=True)
    cost_price = Column(Numeric(10, 2), nullable=True)
    is_primary = Column(Boolean, nullable=False, default=False)

    product = relationship("Product", back_populates="supplier_links")
    supplier = relationship("Supplier", back_populates="product_links")
