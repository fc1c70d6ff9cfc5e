"""
OrderDispatcher — owns order resolution and submission.

SRP: Takes a normalized LimitOrder / MarketOrder plus resolved Credentials and
     turns them into a signed, posted CLOB order.  It knows nothing about HTTP;
     the routes own parsing the body and building the response envelope.

Per request:  ResolveCredentials -> ResolveMarket (only without tickSize)
              -> MapEnums -> Submit.
"""
from __future__ import annotations

import asyncio
import time
from typing import Any, Optional
from loguru import logger

from config import GatewayConfig
from execution import polymarket_client
from execution.credentials import Credentials, short_address
from execution.errors import GatewayError, UpstreamOrderError
from execution.order_models import LimitOrder, MarketOrder, OrderClass, OrderRequest
from interfaces import IMarketResolver, ISessionRegistry, IVenueSession
from monitoring.metrics import GatewayMetrics


class OrderDispatcher:
    """Resolves credentials and tick size, then submits limit / market orders."""

    def __init__(self, cfg: GatewayConfig, sessions: ISessionRegistry,
                 markets: IMarketResolver, metrics: Optional[GatewayMetrics] = None):
        self.cfg = cfg
        self._sessions = sessions
        self._markets = markets
        self._metrics = metrics

    # ── Entry points ─────────────────────────────────────────────────────

    async def place_limit(self, order: LimitOrder, credentials: Credentials) -> Any:
        """Place a LIMIT order (GTC / GTD)."""
        return await self._dispatch(order, credentials)

    async def place_market(self, order: MarketOrder, credentials: Credentials) -> Any:
        """Place a MARKET order for a USD amount (FOK / FAK)."""
        return await self._dispatch(order, credentials)

    # ── Pipeline ─────────────────────────────────────────────────────────

    async def _dispatch(self, order: OrderRequest, credentials: Credentials) -> Any:
        label = order.order_class.value
        try:
            pair = credentials.resolve(self.cfg.signer)
            session = await self._sessions.get_or_create_session(pair, self.cfg.venue)
            tick_size = order.tick_size or await self._resolve_tick_size(order.token_id, session)
            result = await self._submit(order, session, tick_size)
        except Exception:
            self._record(label, "failed")
            raise
        self._record(label, "submitted")
        logger.info(f"✓ {label.upper()} {order.side.value} {order.token_id} "
                    f"{order.time_in_force.value} posted for funder "
                    f"{short_address(pair.funder_address)}")
        return result

    async def _resolve_tick_size(self, token_id: str, session: IVenueSession) -> str:
        try:
            market = await self._markets.resolve_market(token_id, session)
        except GatewayError:
            # MarketNotFound and friends already carry the caller-facing message
            raise
        except Exception as e:
            raise UpstreamOrderError(
                f"Failed to get market info: {polymarket_client.upstream_message(e)}. "
                "Please provide tickSize manually or use a valid tokenID.") from e
        if not market.tick_size:
            raise UpstreamOrderError("tickSize is required but could not be determined from market")
        return market.tick_size

    async def _submit(self, order: OrderRequest, session: IVenueSession, tick_size: str) -> Any:
        neg_risk = bool(order.neg_risk)
        if order.order_class is OrderClass.LIMIT:
            submit = polymarket_client.submit_limit_order
        else:
            submit = polymarket_client.submit_market_order
        started = time.perf_counter()
        try:
            return await asyncio.to_thread(submit, session, order, tick_size, neg_risk)
        except Exception as e:
            logger.error(f"Order submission failed for {order.token_id}: {e}")
            raise self._rewrite_submit_error(order.token_id, e) from e
        finally:
            if self._metrics:
                self._metrics.submit_seconds.labels(
                    order_class=order.order_class.value).observe(time.perf_counter() - started)

    @staticmethod
    def _rewrite_submit_error(token_id: str, exc: Exception) -> UpstreamOrderError:
        """Known SDK failure shapes get clearer messages; others pass through."""
        message = polymarket_client.upstream_message(exc)
        if polymarket_client.upstream_status(exc) == 404:
            return UpstreamOrderError(
                f"Market not found for tokenID: {token_id}. Please verify the tokenID is correct.")
        if "toString" in message:
            return UpstreamOrderError(
                "Invalid market parameters. Market may not exist or tickSize may be incorrect. "
                f"Original error: {message}")
        return UpstreamOrderError(message)

    def _record(self, order_class: str, outcome: str):
        if self._metrics:
            self._metrics.record_order(order_class, outcome)
