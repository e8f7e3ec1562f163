from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter, Request, Response

from ..core.metrics import METRICS_CONTENT_TYPE

router = APIRouter()


@router.get("/health", response_model=Dict)
async def health(request: Request):
    return {
        "status": "healthy",
        "service": request.app.state.service_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/metrics")
async def metrics(request: Request):
    return Response(content=request.app.state.metrics.render(), media_type=METRICS_CONTENT_TYPE)
