"""
Order API routes.

POST /api/orders/limit   - Create and post a limit order
POST /api/orders/market  - Create and post a market order
POST /api/orders         - Legacy alias of /limit
GET  /api/orders/status  - Placeholder
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Mapping

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from loguru import logger

from execution.credentials import Credentials, resolve_credentials
from execution.errors import GatewayError, OrderValidationError
from execution.order_models import OrderRequest, OrderResponse
from execution.order_normalizer import normalize_limit_order, normalize_market_order
from order_dispatcher import OrderDispatcher

router = APIRouter()

Normalizer = Callable[[Mapping[str, Any]], OrderRequest]
Placer = Callable[[Any, Credentials], Awaitable[Any]]


def get_dispatcher(request: Request) -> OrderDispatcher:
    return request.app.state.container.order_dispatcher


async def _read_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        raise OrderValidationError("Request body must be a JSON object")
    return body


def _reply(response: OrderResponse, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(response.to_dict()))


async def _handle(request: Request, normalize: Normalizer, place: Placer,
                  fallback_error: str) -> JSONResponse:
    """Validate -> resolve credentials -> dispatch, wrapped in the envelope."""
    try:
        body = await _read_body(request)
        order = normalize(body)
        credentials = resolve_credentials(body)
        data = await place(order, credentials)
    except OrderValidationError as e:
        logger.warning(f"Rejected {request.url.path}: {e.message}")
        return _reply(OrderResponse.failed(e.message), e.status_code)
    except GatewayError as e:
        logger.error(f"Error on {request.url.path}: {e.message}")
        return _reply(OrderResponse.failed(e.message), e.status_code)
    except Exception as e:
        logger.error(f"Unexpected error on {request.url.path}: {e!r}")
        return _reply(OrderResponse.failed(str(e) or fallback_error), 500)
    return _reply(OrderResponse.ok(data))


@router.post("/limit")
async def create_limit_order(request: Request,
                             dispatcher: OrderDispatcher = Depends(get_dispatcher)):
    """Create and post a limit order (GTC by default, GTD with expiration)."""
    return await _handle(request, normalize_limit_order, dispatcher.place_limit,
                         "Failed to create limit order")


@router.post("/market")
async def create_market_order(request: Request,
                              dispatcher: OrderDispatcher = Depends(get_dispatcher)):
    """Create and post a market order for a USD amount (FOK or FAK)."""
    return await _handle(request, normalize_market_order, dispatcher.place_market,
                         "Failed to create market order")


# Legacy endpoint kept for backward compatibility; same handler as /limit.
router.add_api_route("", create_limit_order, methods=["POST"], deprecated=True,
                     name="create_order_legacy")


@router.get("/status")
async def order_status():
    """Order status (placeholder)."""
    return {"message": "Order status endpoint - coming soon"}
