from typing import Dict, Any, List, Optional
import json
import aiohttp
import logging

from .exceptions import NearConnectionError
from .config import SOLVER_BUS_URL
from .operations import IntentOperations
from .intent import QuoteOption, PublishResult
from .signer import IntentSigner
from .account import IntentAccount
from .types import IntentStatusResult, RpcRequest

logger = logging.getLogger(__name__)

class NearIntentsClient:
    """Client for interacting with NEAR Intents protocol"""

    def __init__(
        self,
        account: IntentAccount,
        session: Optional[aiohttp.ClientSession] = None,
        solver_bus_url: str = SOLVER_BUS_URL
    ):
        self.account = account
        self.solver_bus_url = solver_bus_url
        self.session = session
        self._owns_session = session is None
        self.signer = IntentSigner(account.account_id, account.key_provider)
        self.operations = IntentOperations(self)

    async def ensure_initialized(self) -> None:
        """Create the HTTP session on first use"""
        if self.session is None:
            self.session = aiohttp.ClientSession()
            self._owns_session = True

    async def close(self) -> None:
        """Close client session and cleanup"""
        if self.session and self._owns_session:
            await self.session.close()
        self.session = None

    async def rpc(self, method: str, params: List[Any]) -> Any:
        """Call a solver bus JSON-RPC method and return its result member"""
        await self.ensure_initialized()
        request_data = RpcRequest(id="dontcare", jsonrpc="2.0", method=method, params=params)
        logger.debug(f"Solver bus request: {json.dumps(request_data)}")

        try:
            async with self.session.post(
                self.solver_bus_url,
                headers={"Content-Type": "application/json"},
                json=request_data
            ) as response:
                text = await response.text()
                logger.debug(f"Raw response text: {text}")

                if response.status != 200:
                    raise NearConnectionError(f"Solver bus {method} failed with status {response.status}: {text}")
        except aiohttp.ClientError as e:
            logger.error(f"Solver bus {method} request failed: {e}")
            raise NearConnectionError(f"Solver bus {method} request failed: {e}") from e

        try:
            result = json.loads(text)
        except ValueError as e:
            raise NearConnectionError(f"Solver bus {method} returned invalid JSON: {text}") from e

        if 'error' in result:
            raise NearConnectionError(f"Solver bus {method} error: {result['error']}")
        return result.get('result')

    async def register_public_key(self) -> None:
        """Register the account key with the intents contract if missing"""
        await self.operations.register_public_key()

    async def intent_deposit(self, token: str, amount: str) -> Dict[str, Any]:
        """Deposit tokens to intent contract"""
        return await self.operations.intent_deposit(token, amount)

    async def intent_withdraw(self, destination_address: str, token: str, amount: str) -> PublishResult:
        """Withdraw ``amount`` base units of ``token`` from the intent contract"""
        return await self.operations.intent_withdraw(destination_address, token, amount)

    async def get_quotes(self, token_in: str, amount_in: str, token_out: str) -> List[QuoteOption]:
        """Get quotes for a token swap without executing"""
        return await self.operations.get_quotes(token_in, amount_in, token_out)

    async def check_status(self, intent_hash: str) -> IntentStatusResult:
        """Settlement status of a published intent"""
        return await self.operations.check_status(intent_hash)
