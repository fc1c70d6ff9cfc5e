"""Dispatch pipeline: credentials -> session -> tick size -> submit."""
from decimal import Decimal

import pytest
from py_clob_client.clob_types import OrderType
from py_clob_client.order_builder.constants import BUY, SELL

from conftest import DEFAULT_KEY, EXPLICIT_FUNDER, EXPLICIT_KEY, FakeApiError
from execution.credentials import CredentialPair, DefaultCredentials, ExplicitCredentials
from execution.errors import (
    ConfigurationError,
    CredentialDerivationFailed,
    MarketNotFound,
    UpstreamOrderError,
)
from execution.order_models import LimitOrder, MarketOrder, Side, TimeInForce
from config import DefaultSigner, GatewayConfig


def _limit(**kw):
    base = dict(token_id="0xabc", price=Decimal("0.5"), side=Side.BUY, size=Decimal("10"))
    base.update(kw)
    return LimitOrder(**base)


def _market(**kw):
    base = dict(token_id="0xabc", amount_usd=Decimal("25"), side=Side.SELL,
                time_in_force=TimeInForce.FOK)
    base.update(kw)
    return MarketOrder(**base)


@pytest.fixture
def dispatcher(container):
    return container.order_dispatcher


class TestLimitDispatch:

    @pytest.mark.asyncio
    async def test_fetches_tick_size_when_absent(self, dispatcher, fake_clob):
        fake_clob.tick_sizes["0xabc"] = "0.001"
        result = await dispatcher.place_limit(_limit(), DefaultCredentials())
        assert result["orderID"] == "0xorder1"
        session = fake_clob.sessions[0]
        kind, args, options = session.created[0]
        assert kind == "limit"
        assert (args.token_id, args.price, args.size, args.side) == ("0xabc", 0.5, 10.0, BUY)
        assert options.tick_size == "0.001"
        assert options.neg_risk is False
        assert session.posted[0][1] == OrderType.GTC

    @pytest.mark.asyncio
    async def test_supplied_tick_size_skips_lookup(self, dispatcher, fake_clob):
        await dispatcher.place_limit(_limit(tick_size="0.01", neg_risk=True), DefaultCredentials())
        assert fake_clob.tick_lookups == []
        _, _, options = fake_clob.sessions[0].created[0]
        assert options.tick_size == "0.01"
        assert options.neg_risk is True

    @pytest.mark.asyncio
    async def test_gtd_carries_expiration(self, dispatcher, fake_clob):
        order = _limit(time_in_force=TimeInForce.GTD, expiration=1893456000, tick_size="0.01")
        await dispatcher.place_limit(order, DefaultCredentials())
        session = fake_clob.sessions[0]
        assert session.created[0][1].expiration == 1893456000
        assert session.posted[0][1] == OrderType.GTD

    @pytest.mark.asyncio
    async def test_default_credentials_use_server_signer(self, dispatcher, fake_clob):
        await dispatcher.place_limit(_limit(tick_size="0.01"), DefaultCredentials())
        assert fake_clob.sessions[0].signing_key == DEFAULT_KEY

    @pytest.mark.asyncio
    async def test_explicit_credentials_get_their_own_session(self, dispatcher, fake_clob):
        creds = ExplicitCredentials(CredentialPair(EXPLICIT_KEY, EXPLICIT_FUNDER))
        await dispatcher.place_limit(_limit(tick_size="0.01"), creds)
        await dispatcher.place_limit(_limit(tick_size="0.01"), creds)
        assert len(fake_clob.sessions) == 1
        assert fake_clob.sessions[0].funder == EXPLICIT_FUNDER
        assert len(fake_clob.sessions[0].posted) == 2

    @pytest.mark.asyncio
    async def test_market_not_found_aborts(self, dispatcher, fake_clob):
        fake_clob.tick_error = FakeApiError(404, {"error": "market not found"})
        with pytest.raises(MarketNotFound, match="Market not found for tokenID: 0xabc"):
            await dispatcher.place_limit(_limit(), DefaultCredentials())
        assert fake_clob.sessions[0].created == []

    @pytest.mark.asyncio
    async def test_other_lookup_failure_is_wrapped(self, dispatcher, fake_clob):
        fake_clob.tick_error = FakeApiError(500, {"error": "internal"})
        with pytest.raises(UpstreamOrderError) as exc:
            await dispatcher.place_limit(_limit(), DefaultCredentials())
        assert exc.value.message == (
            "Failed to get market info: internal. "
            "Please provide tickSize manually or use a valid tokenID.")

    @pytest.mark.asyncio
    async def test_empty_tick_size_from_market(self, dispatcher, fake_clob):
        fake_clob.tick_sizes["0xabc"] = ""
        with pytest.raises(UpstreamOrderError, match="could not be determined"):
            await dispatcher.place_limit(_limit(), DefaultCredentials())

    @pytest.mark.asyncio
    async def test_missing_default_signer(self, cfg, fake_clob, metrics):
        from container import ServiceContainer
        bare = GatewayConfig(venue=cfg.venue, signer=DefaultSigner(private_key="", funder_address=""),
                             server=cfg.server)
        dispatcher = ServiceContainer(bare, client_factory=fake_clob, metrics=metrics).order_dispatcher
        with pytest.raises(ConfigurationError, match="PRIVATE_KEY"):
            await dispatcher.place_limit(_limit(), DefaultCredentials())
        assert fake_clob.total_derivations() == 0

    @pytest.mark.asyncio
    async def test_derivation_failure_surfaces(self, dispatcher, fake_clob):
        fake_clob.derive_error = RuntimeError("bad key")
        with pytest.raises(CredentialDerivationFailed, match="Failed to create API key: bad key"):
            await dispatcher.place_limit(_limit(), DefaultCredentials())


class TestSubmitErrors:

    @pytest.mark.asyncio
    async def test_404_rewritten(self, dispatcher, fake_clob):
        fake_clob.post_error = FakeApiError(404, {"error": "Not Found"})
        with pytest.raises(UpstreamOrderError) as exc:
            await dispatcher.place_limit(_limit(tick_size="0.01"), DefaultCredentials())
        assert exc.value.message == (
            "Market not found for tokenID: 0xabc. Please verify the tokenID is correct.")

    @pytest.mark.asyncio
    async def test_tostring_rewritten(self, dispatcher, fake_clob):
        fake_clob.post_error = RuntimeError("Cannot read properties of undefined (reading 'toString')")
        with pytest.raises(UpstreamOrderError) as exc:
            await dispatcher.place_limit(_limit(tick_size="0.01"), DefaultCredentials())
        assert exc.value.message.startswith("Invalid market parameters.")
        assert "Original error: Cannot read properties" in exc.value.message

    @pytest.mark.asyncio
    async def test_other_errors_pass_through(self, dispatcher, fake_clob, metrics):
        fake_clob.post_error = FakeApiError(400, {"error": "not enough balance / allowance"})
        with pytest.raises(UpstreamOrderError, match="not enough balance / allowance"):
            await dispatcher.place_limit(_limit(tick_size="0.01"), DefaultCredentials())
        assert metrics.registry.get_sample_value(
            "gateway_orders_total", {"order_class": "limit", "outcome": "failed"}) == 1.0


class TestMarketDispatch:

    @pytest.mark.asyncio
    async def test_market_order_submission(self, dispatcher, fake_clob, metrics):
        fake_clob.tick_sizes["0xabc"] = "0.01"
        result = await dispatcher.place_market(_market(), DefaultCredentials())
        assert result["success"] is True
        session = fake_clob.sessions[0]
        kind, args, options = session.created[0]
        assert kind == "market"
        assert (args.token_id, args.amount, args.side) == ("0xabc", 25.0, SELL)
        assert args.order_type == OrderType.FOK
        assert options.tick_size == "0.01"
        assert session.posted[0][1] == OrderType.FOK
        assert metrics.registry.get_sample_value(
            "gateway_orders_total", {"order_class": "market", "outcome": "submitted"}) == 1.0

    @pytest.mark.asyncio
    async def test_fak(self, dispatcher, fake_clob):
        await dispatcher.place_market(_market(time_in_force=TimeInForce.FAK, tick_size="0.1"),
                                      DefaultCredentials())
        assert fake_clob.sessions[0].posted[0][1] == OrderType.FAK
        assert fake_clob.tick_lookups == []
