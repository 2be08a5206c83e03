"""Lending contract and credit score tool"""

import logging
from typing import Dict, Any, Optional, Literal
from pydantic import BaseModel, ValidationError as ModelValidationError

from .base import BaseTool
from ..clients.near_intents_client import NearIntentsError, ValidationError
from ..managers.near_intents_manager import NearIntentsManager

logger = logging.getLogger(__name__)

ACCOUNT_OPERATIONS = {
    "lender_balance",
    "loan_status",
    "view_loan",
    "staking_rewards",
    "credit_score",
    "submit_score",
    "activity_history",
    "calculate_credit",
}


class LendingParameters(BaseModel):
    operation: Literal[
        "pool_balance",
        "lender_balance",
        "loan_status",
        "view_loan",
        "staking_rewards",
        "credit_score",
        "submit_score",
        "activity_history",
        "calculate_credit",
    ]
    account_id: Optional[str] = None


class LendingTool(BaseTool):
    """Reads the lending contract and scores borrower accounts"""
    name = "lending"
    description = "Lending pool balances, loans, staking rewards and credit scores"
    operations = ("pool_balance",) + tuple(sorted(ACCOUNT_OPERATIONS))

    def __init__(self, manager: Optional[NearIntentsManager] = None):
        super().__init__()
        self.manager = manager

    async def initialize(self):
        if not self.manager:
            self.manager = NearIntentsManager()
            await self.manager.load_operator_key()

    async def execute(self, parameters: Dict[str, Any]) -> Dict[str, Any]:
        try:
            params = LendingParameters(**parameters)
        except ModelValidationError as e:
            return {"status": "error", "message": f"Invalid parameters: {e.errors()[0]['msg']}"}

        try:
            if params.operation in ACCOUNT_OPERATIONS and not params.account_id:
                raise ValidationError("account_id is required")
            await self.initialize()
            handler = getattr(self, f"_{params.operation}")
            return await handler(params.account_id)
        except NearIntentsError as e:
            logger.error(f"{params.operation} failed: {e}")
            return {"status": "error", "message": str(e)}

    async def _pool_balance(self, account_id: Optional[str]) -> Dict[str, Any]:
        balance = await self.manager.get_lending_client().get_pool_balance()
        return {"status": "success", "poolBalance": balance}

    async def _lender_balance(self, account_id: str) -> Dict[str, Any]:
        balance = await self.manager.get_lending_client().get_lender_balance(account_id)
        return {"status": "success", "balance": balance}

    async def _loan_status(self, account_id: str) -> Dict[str, Any]:
        loan_status = await self.manager.get_lending_client().get_loan_status(account_id)
        return {"status": "success", "loanStatus": loan_status}

    async def _view_loan(self, account_id: str) -> Dict[str, Any]:
        loan = await self.manager.get_lending_client().view_loan(account_id)
        if loan is None:
            return {"status": "success", "loan": None, "message": "No loan found for this account"}
        return {"status": "success", "loan": loan}

    async def _staking_rewards(self, account_id: str) -> Dict[str, Any]:
        balance = await self.manager.get_lending_client().get_staking_rewards(account_id)
        return {"status": "success", "balance": balance}

    async def _credit_score(self, account_id: str) -> Dict[str, Any]:
        data = await self.manager.get_credit_score_service().score_account(account_id)
        return {"status": "success", "data": data}

    async def _submit_score(self, account_id: str) -> Dict[str, Any]:
        score = await self.manager.get_credit_score_service(with_contract=True).submit_score(account_id)
        return {"status": "success", "score": score}

    async def _activity_history(self, account_id: str) -> Dict[str, Any]:
        transfers = await self.manager.get_activity_client().get_transfers(account_id)
        return {
            "status": "success",
            "data": [
                {
                    "account": transfer["account"],
                    "totalIn": transfer["totalIn"],
                    "totalOut": transfer["totalOut"],
                    "contractType": None,
                }
                for transfer in transfers
            ]
        }

    async def _calculate_credit(self, account_id: str) -> Dict[str, Any]:
        activities = await self.manager.get_activity_client().get_activities(account_id)
        return {"status": "success", "activities": activities}
