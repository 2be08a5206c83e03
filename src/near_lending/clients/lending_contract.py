"""Client for the credit-score lending contract"""

import base64
import json
import logging
from enum import Enum
from typing import Any, Dict, Optional, Union

from ..config import DEFAULT_GAS, LENDING_CONTRACT
from .near_intents_client import IntentAccount
from .near_intents_client.exceptions import ConfigurationError, IntentExecutionError, ValidationError
from .near_intents_client.types import ExecutionOutcome
from .near_intents_client.utils import to_decimals

logger = logging.getLogger(__name__)

NEAR_DECIMALS = 24


class LoanStatus(str, Enum):
    PENDING = "Pending"
    BORROWED = "Borrowed"
    NO_LOAN = "NoLoan"


def decode_success_value(outcome: ExecutionOutcome, default: Any = None) -> Any:
    """Decode the base64 JSON ``SuccessValue`` of an execution outcome.

    Returns ``default`` when the call produced no value.
    """
    status = (outcome or {}).get('status')
    if isinstance(status, dict) and 'Failure' in status:
        raise IntentExecutionError(f"Contract call failed: {status['Failure']}")
    if not isinstance(status, dict) or not status.get('SuccessValue'):
        return default
    decoded = base64.b64decode(status['SuccessValue']).decode('utf-8')
    value = json.loads(decoded)
    return default if value is None else value


class LendingContractClient:
    """Function calls against the lending contract"""

    def __init__(self, account: IntentAccount, contract_id: Optional[str] = LENDING_CONTRACT, gas: int = DEFAULT_GAS):
        if not contract_id:
            raise ConfigurationError("LENDING_CONTRACT must be set to use the lending contract")
        self.account = account
        self.contract_id = contract_id
        self.gas = gas

    async def _call(self, method_name: str, args: Dict[str, Any], deposit: Union[int, str] = 0) -> ExecutionOutcome:
        logger.info(f"Calling {self.contract_id}.{method_name}")
        return await self.account.function_call(self.contract_id, method_name, args, self.gas, deposit)

    # Reads

    async def get_pool_balance(self) -> str:
        outcome = await self._call('get_pool_balance', {})
        return decode_success_value(outcome, "0")

    async def get_lender_balance(self, account_id: str) -> str:
        outcome = await self._call('get_lender_balance', {"account_id": account_id})
        return decode_success_value(outcome, "0")

    async def get_staking_rewards(self, account_id: str) -> str:
        outcome = await self._call('get_staking_rewards', {"account_id": account_id})
        return decode_success_value(outcome, "0")

    async def view_loan(self, account_id: str) -> Optional[Any]:
        """Loan record and its display status, ``None`` when there is no loan"""
        outcome = await self._call('view_loan', {"account_id": account_id})
        return decode_success_value(outcome)

    async def get_loan_status(self, account_id: str) -> str:
        outcome = await self._call('get_loan_status', {"account_id": account_id})
        return decode_success_value(outcome, "Unknown")

    # Writes

    async def set_loan_status(self, account_id: str, status: Union[LoanStatus, str]) -> ExecutionOutcome:
        status = LoanStatus(status)
        return await self._call('set_loan_status', {"account_id": account_id, "status": status.value})

    async def set_credit_score(self, account_id: str, score: int) -> ExecutionOutcome:
        if not 0 <= score <= 100:
            raise ValidationError(f"Credit score must be between 0 and 100, got {score}")
        return await self._call('set_credit_score', {"account_id": account_id, "score": int(score)})

    async def create_loan(self, account_id: str, amount: str) -> ExecutionOutcome:
        """Open a loan of ``amount`` NEAR for ``account_id``"""
        return await self._call('create_loan', {
            "account_id": account_id,
            "amount": to_decimals(amount, NEAR_DECIMALS)
        })

    async def repay(self, account_id: str, amount: str) -> ExecutionOutcome:
        """Repay with ``amount`` NEAR attached"""
        return await self._call('repay', {"account_id": account_id}, to_decimals(amount, NEAR_DECIMALS))

    async def deposit(self, amount: str) -> ExecutionOutcome:
        """Add ``amount`` NEAR of lender liquidity to the pool"""
        return await self._call('deposit', {}, to_decimals(amount, NEAR_DECIMALS))

    async def claim_staking_rewards(self) -> ExecutionOutcome:
        return await self._call('claim_staking_rewards', {})
