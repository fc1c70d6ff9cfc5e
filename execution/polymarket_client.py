"""
Polymarket Client — thin adapter over py_clob_client.

Owns everything that knows the SDK's shapes: client construction, API-key
derivation, enum mapping, and the create/sign/post calls for both order
classes. All functions here are blocking; async callers run them through
asyncio.to_thread.
"""
from __future__ import annotations

from typing import Any, Optional

from py_clob_client.client import ClobClient
from py_clob_client.clob_types import (
    ApiCreds,
    MarketOrderArgs,
    OrderArgs,
    OrderType as PolyOrderType,
    PartialCreateOrderOptions,
)
from py_clob_client.order_builder.constants import BUY, SELL

from config import VenueConfig
from execution.order_models import LimitOrder, MarketOrder, Side, TimeInForce
from interfaces import IKeyClient

_SIDES = {Side.BUY: BUY, Side.SELL: SELL}
_ORDER_TYPES = {
    TimeInForce.GTC: PolyOrderType.GTC,
    TimeInForce.GTD: PolyOrderType.GTD,
    TimeInForce.FOK: PolyOrderType.FOK,
    TimeInForce.FAK: PolyOrderType.FAK,
}


def to_venue_side(side: Side) -> str:
    return _SIDES[side]


def to_venue_order_type(tif: TimeInForce) -> PolyOrderType:
    return _ORDER_TYPES[tif]


def build_clob_client(venue: VenueConfig, signing_key: str,
                      creds: Optional[ApiCreds] = None,
                      funder: Optional[str] = None) -> ClobClient:
    """
    Construct a CLOB client.

    Without creds this is the L1 (key-only) client used to derive API keys;
    with creds it is the fully authenticated trading client.
    """
    if creds is None:
        return ClobClient(venue.host, chain_id=venue.chain_id, key=signing_key)
    return ClobClient(
        venue.host, chain_id=venue.chain_id, key=signing_key, creds=creds,
        signature_type=venue.signature_type, funder=funder)


def derive_api_creds(client: IKeyClient) -> Optional[ApiCreds]:
    """Create or re-derive the L2 API credentials for the client's key."""
    return client.create_or_derive_api_creds()


def submit_limit_order(client: Any, order: LimitOrder, tick_size: str,
                       neg_risk: bool) -> Any:
    """Sign a limit order and post it with its time-in-force."""
    args = OrderArgs(
        token_id=order.token_id, price=float(order.price),
        size=float(order.size), side=to_venue_side(order.side),
        expiration=int(order.expiration or 0))
    options = PartialCreateOrderOptions(tick_size=tick_size, neg_risk=neg_risk)
    signed = client.create_order(args, options)
    return client.post_order(signed, to_venue_order_type(order.time_in_force))


def submit_market_order(client: Any, order: MarketOrder, tick_size: str,
                        neg_risk: bool) -> Any:
    """Sign a market order for a USD amount and post it FOK/FAK."""
    order_type = to_venue_order_type(order.time_in_force)
    args = MarketOrderArgs(
        token_id=order.token_id, amount=float(order.amount_usd),
        side=to_venue_side(order.side), order_type=order_type)
    options = PartialCreateOrderOptions(tick_size=tick_size, neg_risk=neg_risk)
    signed = client.create_market_order(args, options)
    return client.post_order(signed, order_type)


def upstream_status(exc: BaseException) -> Optional[int]:
    """HTTP status carried by an SDK error (PolyApiException.status_code), if any."""
    status = getattr(exc, "status_code", None)
    if status is None:
        response = getattr(exc, "response", None)
        status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def upstream_message(exc: BaseException) -> str:
    """Best human-readable text for an SDK error."""
    payload = getattr(exc, "error_msg", None)
    if isinstance(payload, dict):
        return str(payload.get("error") or payload)
    if payload:
        return str(payload)
    return str(exc) or exc.__class__.__name__
