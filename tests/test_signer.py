import json

import base58
import pytest

from near_lending.clients.near_intents_client import (
    FtWithdrawIntent,
    IntentMessage,
    IntentSigner,
    KeyRetrievalError,
    TokenDiffIntent,
    ValidationError,
    serialize_intent,
)
from near_lending.services.key_vault_service import KeyVaultService

from .conftest import ACCOUNT_ID


@pytest.fixture
def signer(key_vault):
    return IntentSigner(ACCOUNT_ID, key_vault)


def _message(**overrides):
    fields = dict(
        signer_id=ACCOUNT_ID,
        nonce="bm9uY2U=",
        verifying_contract="intents.near",
        deadline="2030-01-01T00:00:00.000Z",
        intents=[TokenDiffIntent(diff={"nep141:wrap.near": "-1", "nep141:zec.omft.near": "2"}, referral="ref.near")],
    )
    fields.update(overrides)
    return IntentMessage(**fields)


class TestSerializeIntent:
    def test_compact_and_ordered(self):
        assert serialize_intent(_message()) == (
            '{"signer_id":"operator.near","nonce":"bm9uY2U=","verifying_contract":"intents.near",'
            '"deadline":"2030-01-01T00:00:00.000Z","intents":[{"intent":"token_diff",'
            '"diff":{"nep141:wrap.near":"-1","nep141:zec.omft.near":"2"},"referral":"ref.near"}]}'
        )

    def test_identical_messages_serialize_identically(self):
        assert serialize_intent(_message()) == serialize_intent(_message())

    def test_drops_unset_memo(self):
        message = _message(intents=[FtWithdrawIntent(token="wrap.near", receiver_id="bob.near", amount="5")])
        payload = json.loads(serialize_intent(message))
        assert payload["intents"] == [
            {"intent": "ft_withdraw", "token": "wrap.near", "receiver_id": "bob.near", "amount": "5"}
        ]


class TestMessages:
    def test_token_diff_amounts(self, signer):
        message = signer.token_diff_message("NEAR", "10000000000000000000000000", "ZCASH", "700")
        intent = message.intents[0]
        assert intent.diff == {
            "nep141:wrap.near": "-10000000000000000000000000",
            "nep141:zec.omft.near": "700",
        }
        assert intent.referral == "near-intents.intents-referral.near"
        assert message.signer_id == ACCOUNT_ID
        assert message.verifying_contract == "intents.near"

    def test_withdraw_bridged_token_uses_omft_and_memo(self, signer):
        intent = signer.withdraw_message("t1abc", "ZCASH", "665").intents[0]
        assert intent.token == "zec.omft.near"
        assert intent.receiver_id == "zec.omft.near"
        assert intent.memo == "WITHDRAW_TO:t1abc"
        assert intent.amount == "665"

    def test_withdraw_native_token_goes_to_receiver(self, signer):
        intent = signer.withdraw_message("bob.near", "NEAR", "1000").intents[0]
        assert intent.token == "wrap.near"
        assert intent.receiver_id == "bob.near"
        assert intent.memo is None

    def test_each_message_gets_a_fresh_nonce(self, signer):
        first = signer.withdraw_message("bob.near", "NEAR", "1")
        second = signer.withdraw_message("bob.near", "NEAR", "1")
        assert first.nonce != second.nonce


class TestSigning:
    @pytest.mark.asyncio
    async def test_signature_verifies_against_account_key(self, signer, private_key):
        _, public_key = private_key
        signed = await signer.sign_intent(_message())

        assert signed.standard == "raw_ed25519"
        assert signed.payload == serialize_intent(_message())
        assert signed.signature.startswith("ed25519:")

        signature = base58.b58decode(signed.signature[len("ed25519:"):])
        # raises InvalidSignature on mismatch
        public_key.verify(signature, signed.payload.encode("utf-8"))

    @pytest.mark.asyncio
    async def test_public_key_matches_signing_key(self, signer, private_key):
        _, public_key = private_key
        from cryptography.hazmat.primitives import serialization
        raw = public_key.public_bytes(serialization.Encoding.Raw, serialization.PublicFormat.Raw)

        signed = await signer.sign("payload")
        assert signed.public_key == "ed25519:" + base58.b58encode(raw).decode("utf-8")

    @pytest.mark.asyncio
    async def test_signature_is_deterministic(self, signer):
        first = await signer.sign("same payload")
        second = await signer.sign("same payload")
        assert first.signature == second.signature

    @pytest.mark.asyncio
    async def test_missing_key_is_fatal(self):
        signer = IntentSigner(ACCOUNT_ID, KeyVaultService("empty"))
        with pytest.raises(KeyRetrievalError):
            await signer.sign("payload")


def test_token_diff_rejects_identical_assets(signer):
    with pytest.raises(ValidationError):
        signer.token_diff_message("NEAR", "10", "NEAR", "700")
