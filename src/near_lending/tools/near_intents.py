"""NEAR Intents Tool Implementation"""

import logging
from typing import Dict, Any, Optional, Literal
from pydantic import BaseModel, Field, ValidationError as ModelValidationError

from .base import BaseTool
from ..clients.lending_contract import LoanStatus
from ..clients.near_intents_client import NearIntentsError, SwapState, ValidationError
from ..clients.near_intents_client.config import ASSET_MAP
from ..clients.near_intents_client.utils import from_decimals
from ..managers.near_intents_manager import NearIntentsManager

logger = logging.getLogger(__name__)

DEFAULT_USER = "default_user"


class NearIntentsParameters(BaseModel):
    """Parameters for NEAR Intents operations"""
    operation: Literal["quote", "swap", "status"] = Field(
        description="Operation type"
    )
    token_in: Optional[str] = Field(default=None, description="Input token symbol (e.g., 'NEAR', 'USDC')")
    token_out: Optional[str] = Field(default=None, description="Output token symbol")
    amount: Optional[str] = Field(default=None, description="Human-readable amount of input token")
    address: Optional[str] = Field(default=None, description="Destination address for the withdrawal")
    account_id: Optional[str] = Field(default=None, description="Borrower account for loan bookkeeping")
    swap_type: Optional[str] = Field(default=None, description="'borrow' marks the account's loan as borrowed")
    intent_hash: Optional[str] = Field(default=None, description="Intent hash for status checks")


def _error(message: str) -> Dict[str, Any]:
    return {"status": "error", "message": message}


class NearIntentsTool(BaseTool):
    """Tool for quoting and executing intent swaps"""
    name = "near_intents"
    description = "Quote, execute and track NEAR Intents swaps"
    operations = ("quote", "swap", "status")

    def __init__(self, manager: Optional[NearIntentsManager] = None):
        super().__init__()
        self.manager = manager

    async def initialize(self):
        """Initialize NEAR Intents manager"""
        if not self.manager:
            self.manager = NearIntentsManager()
            await self.manager.load_operator_key()

    async def execute(self, parameters: Dict[str, Any]) -> Dict[str, Any]:
        """Execute NEAR Intent operation"""
        try:
            params = NearIntentsParameters(**parameters)
        except ModelValidationError as e:
            return _error(f"Invalid parameters: {e.errors()[0]['msg']}")

        try:
            await self.initialize()
            if params.operation == "quote":
                return await self._quote(params)
            if params.operation == "swap":
                return await self._swap(params)
            return await self._status(params)
        except NearIntentsError as e:
            logger.error(f"{params.operation} failed: {e}")
            return _error(str(e))

    async def _quote(self, params: NearIntentsParameters) -> Dict[str, Any]:
        if not (params.token_in and params.token_out and params.amount):
            raise ValidationError("Missing required parameters. Please provide token_in, token_out and amount.")
        client = await self.manager.get_client(DEFAULT_USER)
        options = await client.get_quotes(params.token_in, params.amount, params.token_out)
        return {
            "status": "success",
            "quote": options[0].model_dump() if options else None
        }

    async def _swap(self, params: NearIntentsParameters) -> Dict[str, Any]:
        if not (params.address and params.amount and params.token_in and params.token_out and params.swap_type):
            raise ValidationError(
                "Missing required parameters. Please provide receiver address, amount, "
                "token_in, token_out, and swap_type."
            )
        if params.swap_type == "borrow" and not params.account_id:
            raise ValidationError("account_id is required for borrow swaps")

        orchestrator = await self.manager.get_orchestrator(DEFAULT_USER)
        outcome = await orchestrator.run(params.token_in, params.amount, params.token_out, params.address)

        if outcome.state == SwapState.FAILED:
            if outcome.failed_at == SwapState.REQUESTING:
                message = f"Swap failed: {outcome.error}. Please try again."
            elif outcome.failed_at == SwapState.WITHDRAWING:
                message = f"Withdrawal failed after settlement {outcome.settle_intent_hash}: {outcome.error}"
            else:
                message = f"Swap failed: {outcome.error}"
            return {**_error(message), "swap": outcome.model_dump(mode="json")}

        if params.swap_type == "borrow":
            await self.manager.get_lending_client().set_loan_status(params.account_id, LoanStatus.BORROWED)

        decimals = ASSET_MAP[params.token_out]['decimals']
        return {
            "status": "success",
            "swap": {
                **outcome.model_dump(mode="json"),
                "original_amount": str(from_decimals(outcome.amount_out, decimals)),
            },
            "intentHash": outcome.withdraw_intent_hash
        }

    async def _status(self, params: NearIntentsParameters) -> Dict[str, Any]:
        if not params.intent_hash:
            raise ValidationError("Intent hash is required")
        client = await self.manager.get_client(DEFAULT_USER)
        result = await client.check_status(params.intent_hash)
        return {"status": "success", "result": result}
