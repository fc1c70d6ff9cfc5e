"""
Health and metrics routes.

GET /health  - liveness (no upstream calls)
GET /metrics - Prometheus exposition
"""
from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST

from execution.order_models import utc_timestamp

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "ok", "timestamp": utc_timestamp()}


@router.get("/metrics")
async def metrics(request: Request):
    data = request.app.state.container.metrics.render()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
