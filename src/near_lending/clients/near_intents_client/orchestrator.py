"""Two-phase settle-then-withdraw swap flow.

A swap walks REQUESTING -> SELECTING -> SIGNING -> PUBLISHING -> WITHDRAWING
and ends in DONE or FAILED. Network faults end the flow in FAILED with the
upstream message; configuration faults (missing key, missing contract) are
raised. Nothing is rolled back: when the settlement succeeds but the
withdrawal does not, the settled funds stay in the intents contract and the
withdrawal has to be re-submitted with ``NearIntentsClient.intent_withdraw``.
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from .config import DEFAULT_SLIPPAGE, NATIVE_ASSET
from .exceptions import NearConnectionError
from .intent import IntentRequest
from .operations import select_best_quote
from .utils import apply_slippage, validate_swap_pair

logger = logging.getLogger(__name__)

NO_OPTIONS_ERROR = "No options available for swap"


class SwapState(str, Enum):
    REQUESTING = "REQUESTING"
    SELECTING = "SELECTING"
    SIGNING = "SIGNING"
    PUBLISHING = "PUBLISHING"
    WITHDRAWING = "WITHDRAWING"
    DONE = "DONE"
    FAILED = "FAILED"


class SwapOutcome(BaseModel):
    state: SwapState
    states_visited: List[SwapState]
    token_in: str
    token_out: str
    amount_in: Optional[str] = None
    amount_out: Optional[str] = None
    withdraw_amount: Optional[str] = None
    quote_hash: Optional[str] = None
    settle_intent_hash: Optional[str] = None
    withdraw_intent_hash: Optional[str] = None
    failed_at: Optional[SwapState] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == SwapState.DONE


def withdrawal_amount(amount_out: str, token_out: str, slippage: Decimal = DEFAULT_SLIPPAGE) -> str:
    """Amount to withdraw after settling ``amount_out`` of ``token_out``.

    Slippage is only taken off non-native assets; the native asset is
    withdrawn at the settled amount.
    """
    if token_out == NATIVE_ASSET:
        return str(int(amount_out))
    return apply_slippage(amount_out, slippage)


class SwapOrchestrator:
    """Runs quote -> settle -> withdraw for a NearIntentsClient.

    Holds no per-swap state, so one orchestrator can serve concurrent swaps.
    """

    def __init__(self, client, slippage: Decimal = DEFAULT_SLIPPAGE):
        self.client = client
        self.slippage = slippage

    async def run(self, token_in: str, amount_in: str, token_out: str, destination_address: str) -> SwapOutcome:
        validate_swap_pair(token_in, token_out)

        operations = self.client.operations
        outcome = SwapOutcome(
            state=SwapState.REQUESTING,
            states_visited=[SwapState.REQUESTING],
            token_in=token_in,
            token_out=token_out
        )

        def advance(state: SwapState) -> None:
            logger.info(f"Swap {token_in}->{token_out}: {outcome.state.value} -> {state.value}")
            outcome.state = state
            outcome.states_visited.append(state)

        def fail(error: str) -> SwapOutcome:
            outcome.failed_at = outcome.state
            outcome.error = error
            advance(SwapState.FAILED)
            logger.error(f"Swap {token_in}->{token_out} failed at {outcome.failed_at.value}: {error}")
            return outcome

        try:
            request = IntentRequest().asset_in(token_in, amount_in).asset_out(token_out)
            outcome.amount_in = request.exact_amount_in
            quotes = await operations.request_quotes(request)
            if not quotes:
                return fail(NO_OPTIONS_ERROR)

            advance(SwapState.SELECTING)
            best_quote = select_best_quote(quotes)
            outcome.quote_hash = best_quote.quote_hash
            outcome.amount_out = best_quote.amount_out
            logger.info(f"Best option: {best_quote.quote_hash} for {best_quote.amount_out}")

            advance(SwapState.SIGNING)
            signer = self.client.signer
            message = signer.token_diff_message(token_in, outcome.amount_in, token_out, best_quote.amount_out)
            signed = await signer.sign_intent(message)

            advance(SwapState.PUBLISHING)
            settlement = await operations.publish_intent(signed, [best_quote.quote_hash])
            if not settlement.ok:
                return fail(settlement.error)
            outcome.settle_intent_hash = settlement.intent_hash

            advance(SwapState.WITHDRAWING)
            outcome.withdraw_amount = withdrawal_amount(best_quote.amount_out, token_out, self.slippage)
            withdrawal = await operations.intent_withdraw(destination_address, token_out, outcome.withdraw_amount)
            if not withdrawal.ok:
                return fail(withdrawal.error)
            outcome.withdraw_intent_hash = withdrawal.intent_hash
        except NearConnectionError as e:
            return fail(str(e))

        advance(SwapState.DONE)
        return outcome
