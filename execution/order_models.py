"""
Order models — normalized order requests and the response envelope.

A request that made it past the normalizer is always one of LimitOrder or
MarketOrder; nothing downstream re-checks field presence.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Union

# Tick sizes the CLOB accepts (py_clob_client.clob_types.TickSize)
VALID_TICK_SIZES = ("0.1", "0.01", "0.001", "0.0001")


class Side(Enum):
    """Order side."""
    BUY = "BUY"
    SELL = "SELL"


class OrderClass(Enum):
    """Which submission path an order takes."""
    LIMIT = "limit"
    MARKET = "market"


class TimeInForce(Enum):
    """Time-in-force vocabulary, split by order class."""
    GTC = "GTC"
    GTD = "GTD"
    FOK = "FOK"
    FAK = "FAK"

    @property
    def order_class(self) -> OrderClass:
        if self in (TimeInForce.FOK, TimeInForce.FAK):
            return OrderClass.MARKET
        return OrderClass.LIMIT


@dataclass(frozen=True)
class LimitOrder:
    """Resting order at a fixed price."""
    token_id: str
    price: Decimal
    side: Side
    size: Decimal
    time_in_force: TimeInForce = TimeInForce.GTC
    tick_size: Optional[str] = None
    neg_risk: Optional[bool] = None
    expiration: Optional[int] = None

    order_class = OrderClass.LIMIT


@dataclass(frozen=True)
class MarketOrder:
    """Immediate order for a USD amount."""
    token_id: str
    amount_usd: Decimal
    side: Side
    time_in_force: TimeInForce
    tick_size: Optional[str] = None
    neg_risk: Optional[bool] = None

    order_class = OrderClass.MARKET


OrderRequest = Union[LimitOrder, MarketOrder]


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class OrderResponse:
    """JSON envelope returned by every order endpoint."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = utc_timestamp()

    @classmethod
    def ok(cls, data: Any) -> "OrderResponse":
        return cls(success=True, data=data)

    @classmethod
    def failed(cls, error: str) -> "OrderResponse":
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": self.success}
        if self.success:
            body["data"] = self.data
        else:
            body["error"] = self.error
        body["timestamp"] = self.timestamp
        return body
