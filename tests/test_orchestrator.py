import json
from decimal import Decimal

import aiohttp
import pytest

from near_lending.clients.near_intents_client import (
    IntentAccount,
    KeyRetrievalError,
    NearIntentsClient,
    SwapOrchestrator,
    SwapState,
    ValidationError,
    withdrawal_amount,
)
from near_lending.services.key_vault_service import KeyVaultService

from .conftest import ACCOUNT_ID, FakeResponse, FakeSession, rpc_response

QUOTES = [
    {"amount_out": "500", "quote_hash": "h1"},
    {"amount_out": "700", "quote_hash": "h2"},
]


@pytest.fixture
def orchestrator(client):
    return SwapOrchestrator(client)


def _payload(session, index):
    return json.loads(session.rpc_params(index)["signed_data"]["payload"])


class TestWithdrawalAmount:
    def test_non_native_takes_slippage(self):
        assert withdrawal_amount("1000000000", "ZCASH") == "950000000"

    def test_native_is_unchanged(self):
        assert withdrawal_amount("1000000000", "NEAR") == "1000000000"

    def test_custom_slippage(self):
        assert withdrawal_amount("1000", "USDC", Decimal("0.01")) == "990"


class TestSwapFlow:
    @pytest.mark.asyncio
    async def test_settle_then_withdraw(self, orchestrator, session):
        session.queue(
            rpc_response(QUOTES),
            rpc_response({"status": "OK", "intent_hash": "abc123"}),
            rpc_response({"status": "OK", "intent_hash": "def456"}),
        )

        outcome = await orchestrator.run("NEAR", "10", "ZCASH", "t1destination")

        assert outcome.state == SwapState.DONE
        assert outcome.succeeded
        assert outcome.states_visited == [
            SwapState.REQUESTING,
            SwapState.SELECTING,
            SwapState.SIGNING,
            SwapState.PUBLISHING,
            SwapState.WITHDRAWING,
            SwapState.DONE,
        ]
        assert outcome.quote_hash == "h2"
        assert outcome.amount_out == "700"
        assert outcome.withdraw_amount == "665"
        assert outcome.settle_intent_hash == "abc123"
        assert outcome.withdraw_intent_hash == "def456"

        assert [r["json"]["method"] for r in session.requests] == ["quote", "publish_intent", "publish_intent"]

        settle = session.rpc_params(1)
        assert settle["quote_hashes"] == ["h2"]
        assert _payload(session, 1)["intents"][0]["diff"] == {
            "nep141:wrap.near": "-10000000000000000000000000",
            "nep141:zec.omft.near": "700",
        }

        withdraw = _payload(session, 2)
        assert withdraw["intents"][0]["amount"] == "665"
        assert withdraw["intents"][0]["memo"] == "WITHDRAW_TO:t1destination"
        assert withdraw["nonce"] != _payload(session, 1)["nonce"]

    @pytest.mark.asyncio
    async def test_native_destination_skips_slippage(self, orchestrator, session):
        session.queue(
            rpc_response([{"amount_out": "1000000000", "quote_hash": "q"}]),
            rpc_response({"status": "OK", "intent_hash": "s"}),
            rpc_response({"status": "OK", "intent_hash": "w"}),
        )

        outcome = await orchestrator.run("USDC", "5", "NEAR", "bob.near")

        assert outcome.withdraw_amount == "1000000000"
        withdraw = _payload(session, 2)["intents"][0]
        assert withdraw["receiver_id"] == "bob.near"
        assert withdraw["token"] == "wrap.near"

    @pytest.mark.asyncio
    async def test_no_liquidity_fails_before_signing(self, orchestrator, session):
        session.queue(rpc_response([]))

        outcome = await orchestrator.run("NEAR", "10", "ZCASH", "t1destination")

        assert outcome.state == SwapState.FAILED
        assert outcome.failed_at == SwapState.REQUESTING
        assert outcome.error == "No options available for swap"
        assert outcome.states_visited == [SwapState.REQUESTING, SwapState.FAILED]
        assert len(session.requests) == 1

    @pytest.mark.asyncio
    async def test_rejected_settlement_does_not_withdraw(self, orchestrator, session):
        session.queue(
            rpc_response(QUOTES),
            rpc_response({"status": "FAILED"}),
        )

        outcome = await orchestrator.run("NEAR", "10", "ZCASH", "t1destination")

        assert outcome.state == SwapState.FAILED
        assert outcome.failed_at == SwapState.PUBLISHING
        assert outcome.error == "FAILED"
        assert outcome.settle_intent_hash is None
        assert len(session.requests) == 2

    @pytest.mark.asyncio
    async def test_rejected_withdrawal_keeps_settlement(self, orchestrator, session):
        session.queue(
            rpc_response(QUOTES),
            rpc_response({"status": "OK", "intent_hash": "abc123"}),
            rpc_response({"status": "FAILED"}),
        )

        outcome = await orchestrator.run("NEAR", "10", "ZCASH", "t1destination")

        assert outcome.state == SwapState.FAILED
        assert outcome.failed_at == SwapState.WITHDRAWING
        assert outcome.settle_intent_hash == "abc123"
        assert outcome.withdraw_amount == "665"
        assert outcome.withdraw_intent_hash is None

    @pytest.mark.asyncio
    async def test_network_fault_surfaces_verbatim(self, orchestrator, session):
        session.queue(
            rpc_response(QUOTES),
            aiohttp.ClientConnectionError("connection reset by peer"),
        )

        outcome = await orchestrator.run("NEAR", "10", "ZCASH", "t1destination")

        assert outcome.state == SwapState.FAILED
        assert outcome.failed_at == SwapState.PUBLISHING
        assert "connection reset by peer" in outcome.error

    @pytest.mark.asyncio
    async def test_malformed_settlement_response_fails_at_publishing(self, orchestrator, session):
        session.queue(
            rpc_response(QUOTES),
            rpc_response("FAILED"),
        )

        outcome = await orchestrator.run("NEAR", "10", "ZCASH", "t1destination")

        assert outcome.state == SwapState.FAILED
        assert outcome.failed_at == SwapState.PUBLISHING
        assert outcome.error == "Malformed publish_intent response: FAILED"
        assert len(session.requests) == 2

    @pytest.mark.asyncio
    async def test_rejection_reason_is_reported(self, orchestrator, session):
        session.queue(
            rpc_response(QUOTES),
            rpc_response({"status": "FAILED", "reason": "quote expired"}),
        )

        outcome = await orchestrator.run("NEAR", "10", "ZCASH", "t1destination")

        assert outcome.failed_at == SwapState.PUBLISHING
        assert outcome.error == "FAILED: quote expired"

    @pytest.mark.asyncio
    async def test_same_asset_swap_is_rejected(self, orchestrator, session):
        with pytest.raises(ValidationError, match="same asset"):
            await orchestrator.run("NEAR", "10", "NEAR", "bob.near")
        assert session.requests == []

    @pytest.mark.asyncio
    async def test_quote_http_fault_fails_at_requesting(self, orchestrator, session):
        session.queue(FakeResponse("unavailable", status=503))

        outcome = await orchestrator.run("NEAR", "10", "ZCASH", "t1destination")

        assert outcome.failed_at == SwapState.REQUESTING
        assert outcome.error == "Solver bus quote failed with status 503: unavailable"

    @pytest.mark.asyncio
    async def test_missing_key_aborts(self):
        session = FakeSession([rpc_response(QUOTES)])
        client = NearIntentsClient(IntentAccount(ACCOUNT_ID, KeyVaultService("empty")), session=session)

        with pytest.raises(KeyRetrievalError):
            await SwapOrchestrator(client).run("NEAR", "10", "ZCASH", "t1destination")
        assert len(session.requests) == 1

    @pytest.mark.asyncio
    async def test_custom_slippage(self, client, session):
        session.queue(
            rpc_response([{"amount_out": "1000", "quote_hash": "q"}]),
            rpc_response({"status": "OK", "intent_hash": "s"}),
            rpc_response({"status": "OK", "intent_hash": "w"}),
        )

        outcome = await SwapOrchestrator(client, slippage=Decimal("0.1")).run("NEAR", "1", "USDT", "0xabc")

        assert outcome.withdraw_amount == "900"
