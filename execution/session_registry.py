"""
Session Registry — credential-scoped cache of authenticated CLOB clients.

SRP: This class owns the two process-lifetime caches (derived API credentials
     and venue sessions) keyed by CredentialPair, and nothing else.

Concurrency: the first request for a new pair derives credentials under a
per-pair asyncio.Lock, so concurrent first-time callers share one derivation
and one session. Cached sessions are returned without taking the lock, and a
pair's lock lives only while requests for it are in flight.
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional
from loguru import logger

from config import VenueConfig
from execution import polymarket_client
from execution.credentials import CredentialPair, short_address
from execution.errors import CredentialDerivationFailed
from interfaces import IClientFactory, IVenueSession
from monitoring.metrics import GatewayMetrics


class SessionRegistry:
    """Returns one ready-to-use venue session per credential pair."""

    def __init__(self, venue: VenueConfig,
                 client_factory: Optional[IClientFactory] = None,
                 metrics: Optional[GatewayMetrics] = None):
        self.venue = venue
        self._factory = client_factory or polymarket_client.build_clob_client
        self._metrics = metrics
        self._sessions: Dict[CredentialPair, IVenueSession] = {}
        self._creds: Dict[CredentialPair, Any] = {}
        self._locks: Dict[CredentialPair, asyncio.Lock] = {}
        self._waiters: Dict[CredentialPair, int] = {}

    def session_count(self) -> int:
        return len(self._sessions)

    def has_session(self, pair: CredentialPair) -> bool:
        return pair in self._sessions

    async def get_or_create_session(self, pair: CredentialPair,
                                    venue: Optional[VenueConfig] = None) -> IVenueSession:
        """Cached session for `pair`, deriving credentials on first use."""
        session = self._sessions.get(pair)
        if session is not None:
            return session

        lock = self._locks.setdefault(pair, asyncio.Lock())
        self._waiters[pair] = self._waiters.get(pair, 0) + 1
        try:
            async with lock:
                # another request may have finished while we waited
                session = self._sessions.get(pair)
                if session is not None:
                    return session
                session = await self._build_session(pair, venue or self.venue)
                self._sessions[pair] = session
                if self._metrics:
                    self._metrics.cached_sessions.set(len(self._sessions))
        finally:
            self._release_lock(pair)
        logger.info(f"✓ CLOB session ready for funder {short_address(pair.funder_address)}")
        return session

    def _release_lock(self, pair: CredentialPair):
        # the lock is dropped once nobody holds or awaits it
        remaining = self._waiters[pair] - 1
        if remaining:
            self._waiters[pair] = remaining
        else:
            del self._waiters[pair]
            del self._locks[pair]

    async def _build_session(self, pair: CredentialPair, venue: VenueConfig) -> IVenueSession:
        creds = self._creds.get(pair)
        if creds is None:
            creds = await self._derive(pair, venue)
            self._creds[pair] = creds
        return await asyncio.to_thread(
            self._factory, venue, pair.signing_key, creds, pair.funder_address)

    async def _derive(self, pair: CredentialPair, venue: VenueConfig) -> Any:
        funder = short_address(pair.funder_address)
        logger.info(f"Deriving CLOB API credentials for funder {funder}")
        try:
            key_client = await asyncio.to_thread(self._factory, venue, pair.signing_key)
            creds = await asyncio.to_thread(polymarket_client.derive_api_creds, key_client)
        except Exception as e:
            logger.error(f"Failed to create/derive API key for funder {funder}: {e}")
            self._record("failed")
            raise CredentialDerivationFailed(
                f"Failed to create API key: {polymarket_client.upstream_message(e)}. "
                "Please check your privateKey and ensure your wallet is properly configured."
            ) from e
        if not creds:
            self._record("empty")
            raise CredentialDerivationFailed("API key creation returned no credentials")
        self._record("ok")
        return creds

    def _record(self, outcome: str):
        if self._metrics:
            self._metrics.record_derivation(outcome)
