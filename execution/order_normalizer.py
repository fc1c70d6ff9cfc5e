"""
Order Normalizer — raw JSON body -> LimitOrder / MarketOrder.

Runs before anything touches the network. Every rejection is an
OrderValidationError naming the offending field. Field names follow the
public API (camelCase); a few aliases are accepted for compatibility.
"""
from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Tuple

from execution.errors import OrderValidationError
from execution.order_models import (
    LimitOrder,
    MarketOrder,
    OrderClass,
    Side,
    TimeInForce,
    VALID_TICK_SIZES,
)

_TOKEN_FIELDS = ("tokenID", "tokenId")
_AMOUNT_FIELDS = ("amount", "amountUsd")
_TIF_FIELDS = ("timeInForce", "orderType")

SIDE_ERROR = "side is required (BUY or SELL)"
AMOUNT_ERROR = "amount is required and must be greater than 0"
MARKET_TIF_ERROR = "orderType is required and must be either FOK or FAK"


def _first(body: Mapping[str, Any], names: Tuple[str, ...]) -> Tuple[str, Any]:
    """First alias carrying a value; blank strings count as absent."""
    for name in names:
        value = body.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        return name, value
    return names[0], None


def _decimal(value: Any) -> Optional[Decimal]:
    """Decimal for a JSON number or numeric string; None if not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            d = Decimal(value.strip())
        except InvalidOperation:
            return None
        return d if d.is_finite() else None
    return None


def _token_id(body: Mapping[str, Any]) -> str:
    _, value = _first(body, _TOKEN_FIELDS)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise OrderValidationError("tokenID is required", field="tokenID")
    return value.strip()


def _positive(body: Mapping[str, Any], name: str) -> Decimal:
    value = body.get(name)
    if value is None:
        raise OrderValidationError(f"{name} is required", field=name)
    number = _decimal(value)
    if number is None:
        raise OrderValidationError(f"{name} must be a number", field=name)
    if number <= 0:
        raise OrderValidationError(f"{name} must be greater than 0", field=name)
    return number


def _side(body: Mapping[str, Any]) -> Side:
    value = body.get("side")
    if not isinstance(value, str):
        raise OrderValidationError(SIDE_ERROR, field="side")
    try:
        return Side(value.strip().upper())
    except ValueError:
        raise OrderValidationError(SIDE_ERROR, field="side") from None


def _time_in_force(body: Mapping[str, Any]) -> Tuple[str, Optional[TimeInForce], Any]:
    """(field, parsed value or None, raw value)."""
    name, raw = _first(body, _TIF_FIELDS)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return name, None, None
    if not isinstance(raw, str):
        return name, None, raw
    try:
        return name, TimeInForce(raw.strip().upper()), raw
    except ValueError:
        return name, None, raw


def _tick_size(body: Mapping[str, Any]) -> Optional[str]:
    value = body.get("tickSize")
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    number = _decimal(value)
    tick = None if number is None else format(number.normalize(), "f")
    if tick not in VALID_TICK_SIZES:
        raise OrderValidationError(
            f"tickSize must be one of {', '.join(VALID_TICK_SIZES)}", field="tickSize")
    return tick


def _neg_risk(body: Mapping[str, Any]) -> Optional[bool]:
    value = body.get("negRisk")
    if value is None:
        return None
    if not isinstance(value, bool):
        raise OrderValidationError("negRisk must be a boolean", field="negRisk")
    return value


def _expiration(body: Mapping[str, Any]) -> Optional[int]:
    value = body.get("expiration")
    if value is None or value == "" or value == 0:
        return None
    number = _decimal(value)
    if number is None or number != number.to_integral_value() or number < 0:
        raise OrderValidationError(
            "expiration must be a unix timestamp in seconds", field="expiration")
    return int(number)


def normalize_limit_order(body: Mapping[str, Any]) -> LimitOrder:
    """Validate a limit order request. Time in force defaults to GTC."""
    token_id = _token_id(body)
    price = _positive(body, "price")
    side = _side(body)
    size = _positive(body, "size")

    field, tif, raw = _time_in_force(body)
    if raw is None:
        tif = TimeInForce.GTC
    elif tif is None:
        raise OrderValidationError(f"{field} must be one of GTC, GTD", field=field)
    elif tif.order_class is OrderClass.MARKET:
        raise OrderValidationError(
            f"Order type {tif.value} requires the market order endpoint (/api/orders/market). "
            "Please use GTC or GTD for limit orders.", field=field)

    expiration = _expiration(body)
    if tif is TimeInForce.GTD and expiration is None:
        raise OrderValidationError("expiration is required for GTD orders", field="expiration")
    if tif is TimeInForce.GTC and expiration is not None:
        raise OrderValidationError("expiration is only supported for GTD orders", field="expiration")

    return LimitOrder(
        token_id=token_id, price=price, side=side, size=size,
        time_in_force=tif, tick_size=_tick_size(body),
        neg_risk=_neg_risk(body), expiration=expiration)


def normalize_market_order(body: Mapping[str, Any]) -> MarketOrder:
    """Validate a market order request. FOK/FAK is mandatory."""
    token_id = _token_id(body)

    name, raw_amount = _first(body, _AMOUNT_FIELDS)
    amount = _decimal(raw_amount)
    if amount is None or amount <= 0:
        raise OrderValidationError(AMOUNT_ERROR, field=name)

    side = _side(body)

    field, tif, _ = _time_in_force(body)
    if tif is None or tif.order_class is not OrderClass.MARKET:
        raise OrderValidationError(MARKET_TIF_ERROR, field=field)

    return MarketOrder(
        token_id=token_id, amount_usd=amount, side=side, time_in_force=tif,
        tick_size=_tick_size(body), neg_risk=_neg_risk(body))
