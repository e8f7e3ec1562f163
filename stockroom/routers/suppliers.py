import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import ConflictError, NotFoundError
from ..core.responses import ok
from ..db.database import get_async_session
from ..db.models import (
    Product as ProductModel,
    ProductSupplier as ProductSupplierModel,
    Supplier as SupplierModel,
)
from ..schemas.suppliers import (
    ProductSupplierCreate,
    SupplierCreate,
    SupplierProductRead,
    SupplierRead,
    SupplierUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_COUNTRY = "Colombia"
DEFAULT_STATUS = "ACTIVE"


async def _get_supplier_or_404(db: AsyncSession, supplier_id: int) -> SupplierModel:
    res = await db.execute(select(SupplierModel).where(SupplierModel.id == supplier_id))
    m = res.scalar_one_or_none()
    if not m:
        raise NotFoundError("Supplier not found")
    return m


@router.get("", response_model=Dict)
async def list_suppliers(
    status: Optional[str] = None,
    city: Optional[str] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_async_session),
):
    stmt = select(SupplierModel)
    if status:
        stmt = stmt.where(SupplierModel.status == status)
    if city:
        stmt = stmt.where(SupplierModel.city == city)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                SupplierModel.name.ilike(pattern),
                SupplierModel.contact_person.ilike(pattern),
                SupplierModel.email.ilike(pattern),
            )
        )

    res = await db.execute(stmt.order_by(SupplierModel.name.asc(), SupplierModel.id.asc()))
    items = [SupplierRead(**s.to_schema) for s in res.scalars().all()]
    return ok(items, with_count=True)


@router.get("/cities/list", response_model=Dict)
async def list_cities(db: AsyncSession = Depends(get_async_session)):
    res = await db.execute(
        select(SupplierModel.city)
        .where(SupplierModel.city.is_not(None))
        .distinct()
        .order_by(SupplierModel.city)
    )
    return ok([c for c in res.scalars().all()])


@router.get("/{supplier_id}", response_model=Dict)
async def get_supplier(supplier_id: int, db: AsyncSession = Depends(get_async_session)):
    m = await _get_supplier_or_404(db, supplier_id)
    return ok(SupplierRead(**m.to_schema))


@router.post("", response_model=Dict, status_code=status.HTTP_201_CREATED)
async def create_supplier(payload: SupplierCreate, db: AsyncSession = Depends(get_async_session)):
    m = SupplierModel(
        name=payload.name,
        contact_person=payload.contact_person,
        email=payload.email,
        phone=payload.phone,
        address=payload.address,
        city=payload.city,
        country=payload.country or DEFAULT_COUNTRY,
        status=payload.status or DEFAULT_STATUS,
    )
    db.add(m)
    await db.commit()
    await db.refresh(m)

    logger.info("Created supplier %s (%s)", m.id, m.name)
    return ok(SupplierRead(**m.to_schema), message="Supplier created successfully")


@router.put("/{supplier_id}", response_model=Dict)
async def update_supplier(
    supplier_id: int,
    payload: SupplierUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    m = await _get_supplier_or_404(db, supplier_id)

    data = payload.model_dump(exclude_unset=True)
    for field in ("name", "country", "status"):
        if data.get(field) is not None:
            setattr(m, field, data[field])
    for field in ("contact_person", "email", "phone", "address", "city"):
        if field in data:
            setattr(m, field, data[field])

    await db.commit()
    await db.refresh(m)

    logger.info("Updated supplier %s", m.id)
    return ok(SupplierRead(**m.to_schema), message="Supplier updated successfully")


@router.delete("/{supplier_id}", response_model=Dict)
async def delete_supplier(supplier_id: int, db: AsyncSession = Depends(get_async_session)):
    m = await _get_supplier_or_404(db, supplier_id)
    await db.delete(m)
    await db.commit()

    logger.info("Deleted supplier %s", supplier_id)
    return ok(message="Supplier deleted successfully")


@router.get("/{supplier_id}/products", response_model=Dict)
async def list_supplier_products(supplier_id: int, db: AsyncSession = Depends(get_async_session)):
    await _get_supplier_or_404(db, supplier_id)

    res = await db.execute(
        select(ProductModel, ProductSupplierModel.cost_price, ProductSupplierModel.is_primary)
        .join(ProductSupplierModel, ProductSupplierModel.product_id == ProductModel.id)
        .where(ProductSupplierModel.supplier_id == supplier_id)
        .order_by(ProductModel.name.asc(), ProductModel.id.asc())
    )
    items = [
        SupplierProductRead(
            id=p.id,
            name=p.name,
            description=p.description,
            sku=p.sku,
            price=p.price,
            category=p.category,
            cost_price=cost_price,
            is_primary=bool(is_primary),
        )
        for (p, cost_price, is_primary) in res.all()
    ]
    return ok(items, with_count=True)


@router.post("/{supplier_id}/products", response_model=Dict, status_code=status.HTTP_201_CREATED)
async def associate_product(
    supplier_id: int,
    payload: ProductSupplierCreate,
    db: AsyncSession = Depends(get_async_session),
):
    await _get_supplier_or_404(db, supplier_id)
    res = await db.execute(select(ProductModel.id).where(ProductModel.id == payload.product_id))
    if res.first() is None:
        raise NotFoundError("Product not found")

    existing = await db.execute(
        select(ProductSupplierModel.id).where(
            and_(
                ProductSupplierModel.supplier_id == supplier_id,
                ProductSupplierModel.product_id == payload.product_id,
            )
        )
    )
    if existing.first() is not None:
        raise ConflictError("Product already associated with this supplier")

    link = ProductSupplierModel(
        product_id=payload.product_id,
        supplier_id=supplier_id,
        cost_price=payload.cost_price,
        is_primary=payload.is_primary,
    )
    db.add(link)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Product already associated with this supplier")
    await db.refresh(link)

    logger.info("Associated product %s with supplier %s", payload.product_id, supplier_id)
    return ok(
        {
            "id": link.id,
            "product_id": link.product_id,
            "supplier_id": link.supplier_id,
            "cost_price": float(link.cost_price) if link.cost_price is not None else None,
            "is_primary": bool(link.is_primary),
        },
        message="Product associated with supplier successfully",
    )


@router.delete("/{supplier_id}/products/{product_id}", response_model=Dict)
async def disassociate_product(
    supplier_id: int,
    product_id: int,
    db: AsyncSession = Depends(get_async_session),
):
    res = await db.execute(
        select(ProductSupplierModel).where(
            and_(
                ProductSupplierModel.supplier_id == supplier_id,
                ProductSupplierModel.product_id == product_id,
            )
        )
    )
    link = res.scalar_one_or_none()
    if not link:
        raise NotFoundError("Association not found")

    await db.delete(link)
    await db.commit()

    logger.info("Disassociated product %s from supplier %s", product_id, supplier_id)
    return ok(message="Product disassociated from supplier successfully")
