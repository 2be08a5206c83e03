import logging
from typing import List, Dict, Any, Optional, Sequence
from pydantic import ValidationError as ModelValidationError

from .exceptions import NearConnectionError, ValidationError
from .intent import IntentRequest, QuoteOption, PublishIntent, PublishResult, SignedIntent
from .config import ASSET_MAP, MAX_GAS, INTENT_CONTRACT
from .types import IntentStatusResult, PublishIntentResult
from .utils import to_decimals, validate_swap_pair, validate_token_support

logger = logging.getLogger(__name__)


def select_best_quote(quotes: Sequence[QuoteOption]) -> Optional[QuoteOption]:
    """Quote with the highest output amount, first one wins ties"""
    best = None
    for quote in quotes:
        if best is None or int(quote.amount_out) > int(best.amount_out):
            best = quote
    return best


class IntentOperations:
    """Operations for NEAR Intents protocol"""

    def __init__(self, client):
        self.client = client

    async def get_quotes(self, token_in: str, amount_in: str, token_out: str) -> List[QuoteOption]:
        """Get quotes from solver bus, an empty list means no liquidity"""
        validate_swap_pair(token_in, token_out)
        request = IntentRequest().asset_in(token_in, amount_in).asset_out(token_out)
        return await self.request_quotes(request)

    async def request_quotes(self, request: IntentRequest) -> List[QuoteOption]:
        result = await self.client.rpc("quote", [request.serialize()])
        if not result:
            logger.info("No quotes available for this swap")
            return []
        try:
            return [QuoteOption.model_validate(option) for option in result]
        except (ModelValidationError, TypeError) as e:
            raise NearConnectionError(f"Malformed quote response: {result}") from e

    def select_best_quote(self, quotes: Sequence[QuoteOption]) -> Optional[QuoteOption]:
        """Select best quote based on output amount"""
        return select_best_quote(quotes)

    async def publish_intent(self, signed_data: SignedIntent, quote_hashes: Optional[List[str]] = None) -> PublishResult:
        """Publish a signed intent to the solver bus"""
        intent = PublishIntent(signed_data=signed_data, quote_hashes=quote_hashes or [])
        result: Optional[PublishIntentResult] = await self.client.rpc("publish_intent", [intent.model_dump()])
        if result is None:
            result = {}
        if not isinstance(result, dict):
            raise NearConnectionError(f"Malformed publish_intent response: {result}")

        status = result.get('status')
        if status == 'OK':
            logger.info(f"Intent published: {result.get('intent_hash')}")
            return PublishResult(ok=True, status=status, intent_hash=result.get('intent_hash'))

        error = status or 'Unknown error'
        if result.get('reason'):
            error = f"{error}: {result['reason']}"
        logger.error(f"Intent publication rejected: {error}")
        return PublishResult(
            ok=False,
            status=status or 'FAILED',
            intent_hash=result.get('intent_hash'),
            error=error
        )

    async def intent_withdraw(self, destination_address: str, token: str, amount: str) -> PublishResult:
        """Sign and publish a withdrawal of ``amount`` base units"""
        if not destination_address:
            raise ValidationError("Destination address is required")
        signer = self.client.signer
        message = signer.withdraw_message(destination_address, token, amount)
        signed = await signer.sign_intent(message)
        return await self.publish_intent(signed)

    async def check_status(self, intent_hash: str) -> IntentStatusResult:
        """Query settlement status of a published intent"""
        if not intent_hash:
            raise ValidationError("Intent hash is required")
        return await self.client.rpc("get_status", [{"intent_hash": intent_hash}]) or {}

    async def register_public_key(self) -> None:
        account = self.client.account
        public_key = f"ed25519:{await account.public_key_str()}"
        registered = await account.view_function(
            INTENT_CONTRACT,
            "has_public_key",
            {"account_id": account.account_id, "public_key": public_key}
        )
        if registered:
            logger.info("Public key already registered")
            return

        logger.info("Registering public key...")
        await account.function_call(
            INTENT_CONTRACT,
            "add_public_key",
            {"public_key": public_key},
            MAX_GAS,
            1  # exactly 1 yoctoNEAR
        )
        logger.info("Public key registered successfully")

    async def intent_deposit(self, token: str, amount: str) -> Dict[str, Any]:
        """Deposit tokens to intent contract"""
        asset = validate_token_support(token)
        deposit_amount = to_decimals(amount, asset['decimals'])
        if deposit_amount == '0':
            raise ValidationError("Amount must be greater than 0")

        account = self.client.account
        logger.info(f"Depositing {amount} {token} ({deposit_amount} base units)")

        if token == "NEAR":
            # Wrap NEAR first
            await account.function_call(
                ASSET_MAP[token]['token_id'],
                "near_deposit",
                {},
                MAX_GAS,
                int(deposit_amount)
            )

        return await account.function_call(
            asset['token_id'],
            'ft_transfer_call',
            {
                "receiver_id": INTENT_CONTRACT,
                "amount": deposit_amount,
                "msg": ""
            },
            MAX_GAS,
            1  # 1 yoctoNEAR for ft_transfer_call
        )
