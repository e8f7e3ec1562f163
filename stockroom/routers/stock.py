from typing import Dict, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import NotFoundError
from ..core.metrics import ServiceMetrics
from ..core.responses import ok
from ..db.database import get_async_session
from ..schemas.stock import MovementResultOut, StockMovementOut, StockMovementRequest, StockOut
from ..services import stock_queries
from ..services.ledger import MovementDirection, register_movement

router = APIRouter()


def _metrics(request: Request) -> ServiceMetrics:
    return request.app.state.metrics


@router.get("", response_model=Dict)
async def get_stock(request: Request, db: AsyncSession = Depends(get_async_session)):
    """All stock records with product name/SKU/price and derived status."""
    rows = await stock_queries.list_stock(db)

    _metrics(request).replace_stock_levels(rows)

    return ok([StockOut(**row) for row in rows], with_count=True)


@router.get("/product/{product_id}", response_model=Dict)
async def get_stock_for_product(product_id: int, db: AsyncSession = Depends(get_async_session)):
    row = await stock_queries.get_stock_for_product(db, product_id)
    if row is None:
        raise NotFoundError("Stock not found")
    return ok(StockOut(**row))


async def _register(
    request: Request,
    db: AsyncSession,
    payload: StockMovementRequest,
    direction: MovementDirection,
) -> MovementResultOut:
    result = await register_movement(
        db,
        product_id=payload.product_id,
        direction=direction,
        quantity=payload.quantity,
        reason=payload.reason,
    )

    metrics = _metrics(request)
    metrics.stock_movements_total.labels(direction.value).inc()
    row = await stock_queries.get_stock_for_product(db, payload.product_id)
    if row is not None:
        metrics.set_stock_level(row["product_id"], row["product_name"], row["quantity"])

    return MovementResultOut(**result.to_dict())


@router.post("/in", response_model=Dict)
async def stock_in(
    payload: StockMovementRequest,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
):
    result = await _register(request, db, payload, MovementDirection.IN)
    return ok(result, message="Stock entry registered successfully")


@router.post("/out", response_model=Dict)
async def stock_out(
    payload: StockMovementRequest,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
):
    result = await _register(request, db, payload, MovementDirection.OUT)
    return ok(result, message="Stock exit registered successfully")


async def _movements(db: AsyncSession, product_id: Optional[int]) -> Dict:
    rows = await stock_queries.list_movements(db, product_id=product_id)
    return ok([StockMovementOut(**row) for row in rows], with_count=True)


@router.get("/movements", response_model=Dict)
async def list_movements(db: AsyncSession = Depends(get_async_session)):
    """Most recent movements across all products, newest first."""
    return await _movements(db, None)


@router.get("/movements/{product_id}", response_model=Dict)
async def list_product_movements(product_id: int, db: AsyncSession = Depends(get_async_session)):
    return await _movements(db, product_id)


@router.get("/alerts/low", response_model=Dict)
async def low_stock_alerts(db: AsyncSession = Depends(get_async_session)):
    rows = await stock_queries.list_low_stock(db)
    return ok([StockOut(**row) for row in rows], with_count=True)
