"""
Seed demo products, suppliers and opening stock.

Run locally:
  python -m stockroom.scripts.seed_demo_data

It uses the same DATABASE_URL / DB_* env vars as the services (dotenv
supported by stockroom.core.config). Safe to run twice: existing SKUs and
supplier names are skipped, and opening stock is only registered for
products whose ledger is still empty.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select

from ..core.config import Settings
from ..core.logging_config import configure_logging
from ..db.database import Database
from ..db.models import Product, ProductSupplier, StockMovement, StockRecord, Supplier
from ..services.ledger import MovementDirection, register_movement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedProduct:
    name: str
    sku: str
    price: Decimal
    category: Optional[str] = None
    opening_stock: int = 0
    description: Optional[str] = None


@dataclass(frozen=True)
class SeedSupplier:
    name: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    city: Optional[str] = None
    skus: tuple[str, ...] = ()


SEED_PRODUCTS: list[SeedProduct] = [
    SeedProduct("Laptop Dell Inspiron 15", "DELL-INS-15", Decimal("2499000.00"), "Electronics", 12),
    SeedProduct("Mouse Logitech M185", "LOG-M185", Decimal("45000.00"), "Accessories", 60),
    SeedProduct("Teclado Mecanico Redragon", "RED-K552", Decimal("159000.00"), "Accessories", 3),
    SeedProduct("Monitor Samsung 24", "SAM-MON-24", Decimal("689000.00"), "Electronics", 8),
    SeedProduct("Cable HDMI 2m", "CAB-HDMI-2M", Decimal("18000.00"), "Cables", 150),
]

SEED_SUPPLIERS: list[SeedSupplier] = [
    SeedSupplier("TecnoDistribuciones SAS", "Laura Gomez", "ventas@tecnodis.co", "Bogota",
                 skus=("DELL-INS-15", "SAM-MON-24")),
    SeedSupplier("Accesorios Andinos", "Carlos Ruiz", "pedidos@andinos.co", "Medellin",
                 skus=("LOG-M185", "RED-K552", "CAB-HDMI-2M")),
]


async def seed(database: Database, min_stock: int, max_stock: int) -> None:
    async with database.session_maker() as db:
        created_products = 0
        for sp in SEED_PRODUCTS:
            res = await db.execute(select(Product).where(Product.sku == sp.sku))
            if res.scalar_one_or_none():
                continue
            db.add(
                Product(
                    name=sp.name,
                    sku=sp.sku,
                    price=sp.price,
                    category=sp.category,
                    description=sp.description,
                    stock=StockRecord(quantity=0, min_stock=min_stock, max_stock=max_stock),
                )
            )
            created_products += 1
        await db.commit()

        res = await db.execute(select(Product))
        by_sku = {p.sku: p for p in res.scalars().all()}

        created_suppliers = 0
        linked = 0
        for ss in SEED_SUPPLIERS:
            res = await db.execute(select(Supplier).where(func.lower(Supplier.name) == ss.name.lower()))
            sup = res.scalar_one_or_none()
            if not sup:
                sup = Supplier(
                    name=ss.name,
                    contact_person=ss.contact_person,
                    email=ss.email,
                    city=ss.city,
                    country="Colombia",
                    status="ACTIVE",
                )
                db.add(sup)
                await db.flush()
                created_suppliers += 1

            for i, sku in enumerate(ss.skus):
                p = by_sku.get(sku)
                if not p:
                    continue
                res = await db.execute(
                    select(ProductSupplier.id).where(
                        ProductSupplier.product_id == p.id, ProductSupplier.supplier_id == sup.id
                    )
                )
                if res.first() is not None:
                    continue
                db.add(
                    ProductSupplier(
                        product_id=p.id,
                        supplier_id=sup.id,
                        cost_price=(p.price * Decimal("0.7")).quantize(Decimal("0.01")),
                        is_primary=(i == 0),
                    )
                )
                linked += 1
        await db.commit()

    # Opening stock goes through the ledger so quantity == sum(IN) - sum(OUT)
    opened = 0
    for sp in SEED_PRODUCTS:
        if sp.opening_stock <= 0 or sp.sku not in by_sku:
            continue
        async with database.session_maker() as db:
            res = await db.execute(
                select(func.count(StockMovement.id)).where(StockMovement.product_id == by_sku[sp.sku].id)
            )
            if res.scalar_one() > 0:
                continue
            await register_movement(
                db,
                product_id=by_sku[sp.sku].id,
                direction=MovementDirection.IN,
                quantity=sp.opening_stock,
                reason="Opening stock",
            )
            opened += 1

    logger.info(
        "Done. Products created: %s. Suppliers created: %s. Links added: %s. Opening movements: %s.",
        created_products, created_suppliers, linked, opened,
    )


async def main(database_url: Optional[str] = None) -> None:
    settings = Settings(database_url=database_url)
    configure_logging(settings.log_level)
    database = Database(settings.database_url, echo=settings.database_echo)
    try:
        await database.create_all()
        await seed(database, settings.default_min_stock, settings.default_max_stock)
    finally:
        await database.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed demo inventory data")
    parser.add_argument("--database-url", default=None, help="Overrides DATABASE_URL")
    args = parser.parse_args()
    asyncio.run(main(args.database_url))
