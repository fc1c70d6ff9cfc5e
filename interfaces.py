"""
Protocol interfaces for dependency injection (DIP — Dependency Inversion Principle).

High-level modules (dispatcher, routes) depend on these abstractions,
not on py_clob_client directly.  This allows swapping the live CLOB client
for a recording fake without touching business logic.
"""
from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from config import VenueConfig


# ── Venue Session ────────────────────────────────────────────────────────────

@runtime_checkable
class IVenueSession(Protocol):
    """The subset of py_clob_client.ClobClient the gateway calls."""

    def get_tick_size(self, token_id: str) -> Any: ...

    def create_order(self, order_args: Any, options: Any = None) -> Any: ...

    def create_market_order(self, order_args: Any, options: Any = None) -> Any: ...

    def post_order(self, order: Any, orderType: Any = None) -> Any: ...


@runtime_checkable
class IKeyClient(Protocol):
    """Key-only (L1) client able to derive API credentials."""

    def create_or_derive_api_creds(self, nonce: Optional[int] = None) -> Any: ...


# ── Client construction ──────────────────────────────────────────────────────

class IClientFactory(Protocol):
    """Builds key-only clients (creds=None) and authenticated sessions."""

    def __call__(self, venue: VenueConfig, signing_key: str,
                 creds: Any = None, funder: Optional[str] = None) -> Any: ...


# ── Market Resolution ────────────────────────────────────────────────────────

@runtime_checkable
class IMarketResolver(Protocol):
    """Looks up tick size / existence for a token."""

    async def resolve_market(self, token_id: str, session: IVenueSession) -> Any: ...


# ── Session Registry ─────────────────────────────────────────────────────────

@runtime_checkable
class ISessionRegistry(Protocol):
    """Credential-scoped cache of venue sessions."""

    async def get_or_create_session(self, pair: Any,
                                    venue: Optional[VenueConfig] = None) -> IVenueSession: ...

    def session_count(self) -> int: ...
