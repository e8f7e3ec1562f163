import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import ConflictError, NotFoundError
from ..core.responses import ok
from ..db.database import get_async_session
from ..db.models import Product as ProductModel, StockRecord as StockRecordModel
from ..schemas.products import ProductCreate, ProductRead, ProductUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_product_or_404(db: AsyncSession, product_id: int) -> ProductModel:
    res = await db.execute(select(ProductModel).where(ProductModel.id == product_id))
    p = res.scalar_one_or_none()
    if not p:
        raise NotFoundError("Product not found")
    return p


async def _ensure_sku_free(db: AsyncSession, sku: str, exclude_id: Optional[int] = None) -> None:
    stmt = select(ProductModel.id).where(ProductModel.sku == sku)
    if exclude_id is not None:
        stmt = stmt.where(ProductModel.id != exclude_id)
    if (await db.execute(stmt)).first():
        raise ConflictError("SKU already exists")


@router.get("", response_model=Dict)
async def list_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_async_session),
):
    stmt = select(ProductModel)
    if category:
        stmt = stmt.where(ProductModel.category == category)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(ProductModel.name.ilike(pattern), ProductModel.sku.ilike(pattern)))

    res = await db.execute(stmt.order_by(ProductModel.name.asc(), ProductModel.id.asc()))
    items = [ProductRead(**p.to_schema) for p in res.scalars().all()]
    return ok(items, with_count=True)


@router.get("/categories/list", response_model=Dict)
async def list_categories(db: AsyncSession = Depends(get_async_session)):
    """Distinct non-null categories, alphabetically."""
    res = await db.execute(
        select(ProductModel.category)
        .where(ProductModel.category.is_not(None))
        .distinct()
        .order_by(ProductModel.category)
    )
    return ok([c for c in res.scalars().all()])


@router.get("/{product_id}", response_model=Dict)
async def get_product(product_id: int, db: AsyncSession = Depends(get_async_session)):
    p = await _get_product_or_404(db, product_id)
    return ok(ProductRead(**p.to_schema))


@router.post("", response_model=Dict, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
):
    """Create a product together with its (empty) stock record."""
    settings = request.app.state.settings
    await _ensure_sku_free(db, payload.sku)

    p = ProductModel(
        name=payload.name,
        description=payload.description,
        sku=payload.sku,
        price=payload.price,
        category=payload.category,
        stock=StockRecordModel(
            quantity=0,
            min_stock=settings.default_min_stock,
            max_stock=settings.default_max_stock,
        ),
    )
    db.add(p)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race on the unique SKU index
        await db.rollback()
        raise ConflictError("SKU already exists")
    await db.refresh(p)

    logger.info("Created product %s (sku=%s)", p.id, p.sku)
    return ok(ProductRead(**p.to_schema), message="Product created successfully")


@router.put("/{product_id}", response_model=Dict)
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    p = await _get_product_or_404(db, product_id)

    data = payload.model_dump(exclude_unset=True)
    if data.get("sku") and data["sku"] != p.sku:
        await _ensure_sku_free(db, data["sku"], exclude_id=p.id)

    for field in ("name", "sku", "price"):
        if data.get(field) is not None:
            setattr(p, field, data[field])
    for field in ("description", "category"):
        if field in data:
            setattr(p, field, data[field])

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("SKU already exists")
    await db.refresh(p)

    logger.info("Updated product %s", p.id)
    return ok(ProductRead(**p.to_schema), message="Product updated successfully")


@router.delete("/{product_id}", response_model=Dict)
async def delete_product(product_id: int, db: AsyncSession = Depends(get_async_session)):
    """Delete a product. Its stock record, movements and supplier links go with it."""
    p = await _get_product_or_404(db, product_id)
    await db.delete(p)
    await db.commit()

    logger.info("Deleted product %s", product_id)
    return ok(message="Product deleted successfully")
