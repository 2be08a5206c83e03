import json
import logging
from typing import Union

import base58

from ...services.key_provider import KeyProvider
from .config import INTENT_CONTRACT, INTENT_REFERRAL, SIGNING_STANDARD
from .exceptions import ValidationError
from .intent import Asset, FtWithdrawIntent, IntentMessage, SignedIntent, TokenDiffIntent
from .utils import generate_nonce, get_future_deadline

logger = logging.getLogger(__name__)


def serialize_intent(message: IntentMessage) -> str:
    """Canonical JSON payload for an intent message.

    Field order follows the model declaration and unset optional fields are
    dropped, so equal messages always produce the same bytes.
    """
    return json.dumps(message.model_dump(exclude_none=True), separators=(',', ':'))


class IntentSigner:
    """Builds and signs intent messages for one signer account"""

    def __init__(self, account_id: str, key_provider: KeyProvider, verifying_contract: str = INTENT_CONTRACT):
        self.account_id = account_id
        self.key_provider = key_provider
        self.verifying_contract = verifying_contract

    def _message(self, intent: Union[TokenDiffIntent, FtWithdrawIntent]) -> IntentMessage:
        return IntentMessage(
            signer_id=self.account_id,
            nonce=generate_nonce(),
            verifying_contract=self.verifying_contract,
            deadline=get_future_deadline(),
            intents=[intent]
        )

    def token_diff_message(self, token_in: str, amount_in: str, token_out: str, amount_out: str) -> IntentMessage:
        """Token diff trading exactly ``amount_in`` for ``amount_out`` (base units)"""
        asset_in = Asset.from_symbol(token_in).asset_id
        asset_out = Asset.from_symbol(token_out).asset_id
        if asset_in == asset_out:
            raise ValidationError(f"Token diff needs two distinct assets, got {asset_in} twice")
        return self._message(TokenDiffIntent(
            diff={
                asset_in: f"-{amount_in}",
                asset_out: str(amount_out)
            },
            referral=INTENT_REFERRAL
        ))

    def withdraw_message(self, destination_address: str, token: str, amount: str) -> IntentMessage:
        """Withdrawal of ``amount`` base units to ``destination_address``"""
        asset = Asset.from_symbol(token)
        if asset.omft:
            # Bridged tokens are burned on the omft contract and released off-chain
            intent = FtWithdrawIntent(
                token=asset.omft,
                receiver_id=asset.omft,
                amount=str(amount),
                memo=f"WITHDRAW_TO:{destination_address}"
            )
        else:
            intent = FtWithdrawIntent(
                token=asset.token_id,
                receiver_id=destination_address,
                amount=str(amount)
            )
        return self._message(intent)

    async def sign(self, payload: str) -> SignedIntent:
        """Sign a serialized payload with the account key"""
        key_pair = await self.key_provider.get_key_pair(self.account_id)
        signature = key_pair.sign(payload.encode('utf-8'))
        return SignedIntent(
            standard=SIGNING_STANDARD,
            payload=payload,
            signature='ed25519:' + base58.b58encode(signature).decode('utf-8'),
            public_key='ed25519:' + base58.b58encode(key_pair.public_key).decode('utf-8')
        )

    async def sign_intent(self, message: IntentMessage) -> SignedIntent:
        signed = await self.sign(serialize_intent(message))
        logger.debug(f"Signed intent with nonce {message.nonce} for {self.account_id}")
        return signed
