"""
Market Resolver — tick size lookup for a token.

The resolver keeps no cache of its own. py_clob_client memoizes tick sizes per
client, so repeat lookups on a cached session may not reach the venue.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional
from loguru import logger

from execution import polymarket_client
from execution.errors import MarketNotFound
from interfaces import IVenueSession
from monitoring.metrics import GatewayMetrics


@dataclass(frozen=True)
class MarketDescriptor:
    token_id: str
    tick_size: str
    exists: bool = True


def is_not_found(exc: BaseException) -> bool:
    """True when an SDK error means the token/market does not exist."""
    if polymarket_client.upstream_status(exc) == 404:
        return True
    return "not found" in polymarket_client.upstream_message(exc).lower()


class MarketResolver:
    """Fetches tick size and confirms a market exists."""

    def __init__(self, metrics: Optional[GatewayMetrics] = None):
        self._metrics = metrics

    async def resolve_market(self, token_id: str, session: IVenueSession) -> MarketDescriptor:
        try:
            tick_size = await asyncio.to_thread(session.get_tick_size, token_id)
        except Exception as e:
            if is_not_found(e):
                self._record("not_found")
                logger.warning(f"Market not found for token {token_id}")
                raise MarketNotFound(token_id) from e
            self._record("error")
            raise
        self._record("ok")
        tick = "" if tick_size is None else str(tick_size)
        logger.info(f"📊 Market found. Using tickSize: {tick}")
        return MarketDescriptor(token_id=token_id, tick_size=tick)

    def _record(self, outcome: str):
        if self._metrics:
            self._metrics.record_market_lookup(outcome)
