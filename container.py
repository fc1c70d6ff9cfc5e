"""
Service Container — wires and owns all shared service instances.

SRP:  This module's only job is construction + lifecycle of shared services.
DIP:  All consumers receive interfaces, not concrete classes.

The SessionRegistry held here is the only process-wide mutable state in the
gateway; the app factory stores the container on app.state and routes reach
it from there.

Usage:
    container = ServiceContainer(cfg)       # build once at startup
    app = create_app(container)

    # Tests swap the CLOB client for a fake:
    container = ServiceContainer(cfg, client_factory=fake_factory)
"""
from __future__ import annotations

from typing import Optional
from loguru import logger

from config import GatewayConfig, get_config
from interfaces import IClientFactory, IMarketResolver, ISessionRegistry
from monitoring.metrics import GatewayMetrics, get_gateway_metrics


class ServiceContainer:
    """
    Owns and lazily constructs the gateway's shared services.

    Every property returns a Protocol-typed reference so consumers
    never depend on concrete implementations.
    """

    def __init__(self, cfg: Optional[GatewayConfig] = None,
                 client_factory: Optional[IClientFactory] = None,
                 metrics: Optional[GatewayMetrics] = None):
        self.cfg = cfg or get_config()
        self._client_factory = client_factory
        self._metrics: Optional[GatewayMetrics] = metrics
        self._session_registry: Optional[ISessionRegistry] = None
        self._market_resolver: Optional[IMarketResolver] = None
        self._order_dispatcher = None
        logger.info("ServiceContainer initialised")

    # ── Lazy constructors ────────────────────────────────────────────────

    @property
    def metrics(self) -> GatewayMetrics:
        if self._metrics is None:
            self._metrics = get_gateway_metrics()
        return self._metrics

    @property
    def session_registry(self) -> ISessionRegistry:
        if self._session_registry is None:
            from execution.session_registry import SessionRegistry
            self._session_registry = SessionRegistry(
                self.cfg.venue, client_factory=self._client_factory, metrics=self.metrics)
        return self._session_registry

    @property
    def market_resolver(self) -> IMarketResolver:
        if self._market_resolver is None:
            from execution.market_resolver import MarketResolver
            self._market_resolver = MarketResolver(metrics=self.metrics)
        return self._market_resolver

    @property
    def order_dispatcher(self):
        if self._order_dispatcher is None:
            from order_dispatcher import OrderDispatcher
            self._order_dispatcher = OrderDispatcher(
                self.cfg, self.session_registry, self.market_resolver, metrics=self.metrics)
        return self._order_dispatcher


# ── Module-level singleton ───────────────────────────────────────────────────

_container: Optional[ServiceContainer] = None


def get_container(cfg: Optional[GatewayConfig] = None) -> ServiceContainer:
    """Get or create the global service container."""
    global _container
    if _container is None:
        _container = ServiceContainer(cfg)
    return _container
