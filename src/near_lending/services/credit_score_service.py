import logging
import time
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from ..clients.activity_client import ActivityClient
from ..clients.lending_contract import LendingContractClient
from ..clients.near_intents_client.exceptions import ConfigurationError, NearConnectionError

logger = logging.getLogger(__name__)

NANOS_PER_DAY = 24 * 60 * 60 * 10**9


def calculate_credit_score(total_in: float, total_out: float, account_age: int, is_safe: bool) -> float:
    """Heuristic 0-100 score for one counterparty.

    Account age gives a point per 30 days (max 30), net inflow ratio gives up
    to 40 points and a safe account adds 50.
    """
    score = min(account_age // 30, 30)

    financial_score = min((total_in - total_out) / total_in, 1) * 40 if total_in > 0 else 0
    score += max(financial_score, 0)

    if is_safe:
        score += 50

    return min(max(score, 0), 100)


def account_age_days(account_info: Dict[str, Any], now_ns: Optional[int] = None) -> Optional[int]:
    created = int(account_info.get('timestamp_creation') or 0)
    if not created:
        return None
    now_ns = now_ns if now_ns is not None else time.time_ns()
    return (now_ns - created) // NANOS_PER_DAY


class CreditScoreService:
    def __init__(self, activity_client: ActivityClient, contract: Optional[LendingContractClient] = None):
        self.activity_client = activity_client
        self.contract = contract

    async def score_account(self, account_id: str) -> Dict[str, Any]:
        """Average credit score over the account's transfer counterparties"""
        transfers = await self.activity_client.get_transfers(account_id)

        activities: List[Dict[str, Any]] = []
        total_score = 0.0
        for transfer in transfers:
            counterparty = transfer['account']
            try:
                account_info = await self.activity_client.get_account_info(counterparty)
            except NearConnectionError as e:
                logger.warning(f"Failed to fetch account info for account: {counterparty}: {e}")
                continue

            age = account_age_days(account_info)
            # only an explicit null deletion timestamp marks an account as unsafe
            is_safe = account_info.get('timestamp_deletion', True) is not None
            score = calculate_credit_score(
                total_in=float(transfer['totalIn']),
                total_out=float(transfer['totalOut']),
                account_age=age or 0,
                is_safe=is_safe
            )
            activities.append({
                "account": counterparty,
                "totalIn": transfer['totalIn'],
                "totalOut": transfer['totalOut'],
                "accountAge": age if age is not None else 'Unknown',
                "isSafe": is_safe,
                "creditScore": score,
            })
            total_score += score

        credit_score = 0
        if activities:
            average = Decimal(str(total_score)) / len(activities)
            credit_score = int(average.quantize(Decimal('1'), rounding=ROUND_HALF_UP))

        logger.info(f"Credit score for {account_id}: {credit_score} over {len(activities)} counterparties")
        return {
            "accountId": account_id,
            "CreditScore": credit_score,
            "allActivities": activities,
        }

    async def submit_score(self, account_id: str) -> int:
        """Score the account and record it on the lending contract"""
        if self.contract is None:
            raise ConfigurationError("A lending contract client is required to submit scores")
        result = await self.score_account(account_id)
        score = result["CreditScore"]
        await self.contract.set_credit_score(account_id, score)
        return score
