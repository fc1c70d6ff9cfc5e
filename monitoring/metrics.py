"""
Gateway Metrics — Prometheus counters for the order path.

SRP: metric definitions and recording helpers only. The HTTP exposition lives
in routes/health.py.
"""
from __future__ import annotations

from typing import Optional
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    REGISTRY,
    generate_latest,
)


class GatewayMetrics:
    """Owns the gateway's Prometheus collectors on one registry."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else REGISTRY
        self._setup_counters()
        self.cached_sessions = Gauge(
            'gateway_cached_sessions', 'Venue sessions held by the session registry',
            registry=self.registry)
        self.submit_seconds = Histogram(
            'gateway_order_submit_seconds', 'Time spent signing and posting an order',
            ['order_class'], registry=self.registry,
            buckets=[0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10])

    def _setup_counters(self):
        counter_defs = [
            ('orders', 'gateway_orders_total', 'Order requests by class and outcome',
             ['order_class', 'outcome']),
            ('derivations', 'gateway_credential_derivations_total',
             'API credential derivations by outcome', ['outcome']),
            ('market_lookups', 'gateway_market_lookups_total',
             'Tick size lookups by outcome', ['outcome']),
        ]
        for attr, name, desc, labels in counter_defs:
            setattr(self, attr, Counter(name, desc, labels, registry=self.registry))

    def record_order(self, order_class: str, outcome: str) -> None:
        self.orders.labels(order_class=order_class, outcome=outcome).inc()

    def record_derivation(self, outcome: str) -> None:
        self.derivations.labels(outcome=outcome).inc()

    def record_market_lookup(self, outcome: str) -> None:
        self.market_lookups.labels(outcome=outcome).inc()

    def render(self) -> bytes:
        return generate_latest(self.registry)


# ── Module-level singleton ───────────────────────────────────────────────────

_metrics: Optional[GatewayMetrics] = None


def get_gateway_metrics() -> GatewayMetrics:
    """Process-wide metrics on the default registry (registered once)."""
    global _metrics
    if _metrics is None:
        _metrics = GatewayMetrics()
    return _metrics
