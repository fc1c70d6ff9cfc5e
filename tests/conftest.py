"""
Shared fixtures: a recording fake of the CLOB client so no test touches the
network, plus a fully wired container/app around it.
"""
from __future__ import annotations

import threading
import time
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry
from py_clob_client.clob_types import ApiCreds

from config import DefaultSigner, GatewayConfig, ServerConfig, VenueConfig
from container import ServiceContainer
from monitoring.metrics import GatewayMetrics
from server import create_app

DEFAULT_KEY = "0x" + "11" * 32
DEFAULT_FUNDER = "0xDefaultFunder00000000000000000000000000a1"
EXPLICIT_KEY = "0x" + "22" * 32
EXPLICIT_FUNDER = "0xExplicitFunder0000000000000000000000000b2"


class FakeApiError(Exception):
    """Mimics py_clob_client PolyApiException (status_code + error_msg)."""

    def __init__(self, status_code: Optional[int], error_msg: Any):
        super().__init__(f"PolyApiException[status_code={status_code}, error_message={error_msg}]")
        self.status_code = status_code
        self.error_msg = error_msg


class FakeKeyClient:
    """Key-only client: derives API creds."""

    def __init__(self, venue, signing_key, clob):
        self.venue = venue
        self.signing_key = signing_key
        self._clob = clob

    def create_or_derive_api_creds(self, nonce=None):
        return self._clob.derive(self.signing_key)


class FakeSession:
    """Authenticated client: records every order it is asked to sign and post."""

    def __init__(self, venue, signing_key, creds, funder, clob):
        self.venue = venue
        self.signing_key = signing_key
        self.creds = creds
        self.funder = funder
        self._clob = clob
        self.created: List[tuple] = []
        self.posted: List[tuple] = []

    def get_tick_size(self, token_id):
        self._clob.tick_lookups.append(token_id)
        if self._clob.tick_error is not None:
            raise self._clob.tick_error
        return self._clob.tick_sizes.get(token_id, "0.01")

    def create_order(self, order_args, options=None):
        self.created.append(("limit", order_args, options))
        return {"signed": order_args.token_id}

    def create_market_order(self, order_args, options=None):
        self.created.append(("market", order_args, options))
        return {"signed": order_args.token_id}

    def post_order(self, order, orderType=None):
        self.posted.append((order, orderType))
        if self._clob.post_error is not None:
            raise self._clob.post_error
        return {"success": True, "orderID": "0xorder1", "status": "live", "errorMsg": ""}


class FakeClob:
    """Client factory with the same call shape as polymarket_client.build_clob_client."""

    def __init__(self):
        self.derivations: Dict[str, int] = {}
        self.derive_delay = 0.0
        self.derive_error: Optional[Exception] = None
        self.derive_returns_none = False
        self.tick_sizes: Dict[str, str] = {}
        self.tick_error: Optional[Exception] = None
        self.tick_lookups: List[str] = []
        self.post_error: Optional[Exception] = None
        self.sessions: List[FakeSession] = []
        self._lock = threading.Lock()

    def __call__(self, venue, signing_key, creds=None, funder=None):
        if creds is None:
            return FakeKeyClient(venue, signing_key, self)
        session = FakeSession(venue, signing_key, creds, funder, self)
        self.sessions.append(session)
        return session

    def derive(self, signing_key):
        with self._lock:
            self.derivations[signing_key] = self.derivations.get(signing_key, 0) + 1
        if self.derive_delay:
            time.sleep(self.derive_delay)
        if self.derive_error is not None:
            raise self.derive_error
        if self.derive_returns_none:
            return None
        return ApiCreds(api_key=f"key-{signing_key[-4:]}", api_secret="secret",
                        api_passphrase="passphrase")

    def total_derivations(self) -> int:
        return sum(self.derivations.values())


@pytest.fixture
def venue() -> VenueConfig:
    return VenueConfig(host="https://clob.test", chain_id=137, signature_type=1)


@pytest.fixture
def cfg(venue) -> GatewayConfig:
    return GatewayConfig(
        venue=venue,
        signer=DefaultSigner(private_key=DEFAULT_KEY, funder_address=DEFAULT_FUNDER),
        server=ServerConfig(bind_host="127.0.0.1", port=3000, log_level="DEBUG",
                            cors_origins=("*",)),
    )


@pytest.fixture
def fake_clob() -> FakeClob:
    return FakeClob()


@pytest.fixture
def metrics() -> GatewayMetrics:
    return GatewayMetrics(CollectorRegistry())


@pytest.fixture
def container(cfg, fake_clob, metrics) -> ServiceContainer:
    return ServiceContainer(cfg, client_factory=fake_clob, metrics=metrics)


@pytest.fixture
def client(container):
    with TestClient(create_app(container)) as test_client:
        yield test_client
