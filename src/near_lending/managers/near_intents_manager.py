"""
NEAR Intents Manager Service
Coordinates NEAR clients and operator key management
"""

import logging
from typing import Optional, Dict

from .. import config
from ..clients.activity_client import ActivityClient
from ..clients.lending_contract import LendingContractClient
from ..clients.near_intents_client import IntentAccount, NearIntentsClient, SwapOrchestrator
from ..clients.near_intents_client.exceptions import ConfigurationError
from ..services.credit_score_service import CreditScoreService
from ..services.key_vault_service import KeyVaultService

logger = logging.getLogger(__name__)


class NearIntentsManager:
    """Manager for the operator account's NEAR clients"""

    def __init__(self, key_vault: Optional[KeyVaultService] = None, account_id: Optional[str] = None):
        self.key_vault = key_vault or KeyVaultService(config.KEY_VAULT_SECRET)
        self.account_id = account_id or config.NEAR_ACCOUNT_ID
        self.clients: Dict[str, NearIntentsClient] = {}
        self._account: Optional[IntentAccount] = None
        self._activity_client: Optional[ActivityClient] = None

    async def load_operator_key(self, private_key: Optional[str] = None) -> None:
        """Populate the key vault with the operator key from the environment"""
        private_key = private_key or config.NEAR_PRIVATE_KEY
        if not self.account_id or not private_key:
            raise ConfigurationError("NEAR_ACCOUNT_ID and NEAR_PRIVATE_KEY must be set")
        await self.key_vault.store_key(self.account_id, {
            "account_id": self.account_id,
            "private_key": private_key
        })

    @property
    def account(self) -> IntentAccount:
        if not self.account_id:
            raise ConfigurationError("NEAR_ACCOUNT_ID must be set")
        if self._account is None:
            self._account = IntentAccount(self.account_id, self.key_vault)
        return self._account

    async def get_client(self, user_id: str) -> NearIntentsClient:
        """Get or create an intents client for a caller"""
        if user_id not in self.clients:
            self.clients[user_id] = NearIntentsClient(self.account)
        return self.clients[user_id]

    async def get_orchestrator(self, user_id: str) -> SwapOrchestrator:
        return SwapOrchestrator(await self.get_client(user_id))

    def get_lending_client(self) -> LendingContractClient:
        return LendingContractClient(self.account, config.LENDING_CONTRACT)

    def get_activity_client(self) -> ActivityClient:
        if self._activity_client is None:
            self._activity_client = ActivityClient()
        return self._activity_client

    def get_credit_score_service(self, with_contract: bool = False) -> CreditScoreService:
        contract = self.get_lending_client() if with_contract else None
        return CreditScoreService(self.get_activity_client(), contract)

    async def remove_client(self, user_id: str) -> bool:
        """Remove client and close its session"""
        client = self.clients.pop(user_id, None)
        if client is None:
            return False
        await client.close()
        return True

    async def cleanup(self):
        """Close all clients"""
        for user_id in list(self.clients.keys()):
            await self.remove_client(user_id)
        if self._activity_client is not None:
            await self._activity_client.close()
            self._activity_client = None
