from typing import Dict, Any, Optional, Union
import asyncio
import json
import base58
import logging
from near_api.providers import JsonProvider
from near_api.signer import Signer
from near_api.account import Account

from ...services.key_provider import KeyProvider
from .exceptions import IntentExecutionError, NearConnectionError
from .config import NEAR_RPC_URL

logger = logging.getLogger(__name__)

class IntentAccount:
    """NEAR account used for intent signing and contract calls"""

    def __init__(self, account_id: str, key_provider: KeyProvider, rpc_url: str = NEAR_RPC_URL):
        self.account_id = account_id
        self.key_provider = key_provider
        self.rpc_url = rpc_url
        self.provider = JsonProvider(rpc_url)
        self._near_account: Optional[Account] = None

    async def public_key_str(self) -> str:
        """Base58 public key of the account's signing key"""
        key_pair = await self.key_provider.get_key_pair(self.account_id)
        return base58.b58encode(key_pair.public_key).decode('utf-8')

    async def _get_near_account(self) -> Account:
        if self._near_account is None:
            key_pair = await self.key_provider.get_key_pair(self.account_id)
            signer = Signer(self.account_id, key_pair)
            try:
                # Account() fetches the access key and account state over RPC
                self._near_account = await asyncio.to_thread(Account, self.provider, signer, self.account_id)
            except Exception as e:
                raise NearConnectionError(f"Failed to load account {self.account_id}: {e}") from e
        return self._near_account

    async def function_call(
        self,
        contract_id: str,
        method_name: str,
        args: Dict,
        gas: int,
        deposit: Union[int, str] = 0
    ) -> Dict[str, Any]:
        """Execute a function call on a NEAR contract"""
        near_account = await self._get_near_account()
        if isinstance(deposit, str):
            deposit = int(deposit)

        args = self._prepare_args(args)
        logger.debug(f"Calling {contract_id}.{method_name} with deposit {deposit}")
        try:
            return await asyncio.to_thread(
                near_account.function_call,
                contract_id,
                method_name,
                args,
                gas,
                deposit
            )
        except Exception as e:
            logger.error(f"Function call {contract_id}.{method_name} failed: {e}")
            raise IntentExecutionError(f"Function call {method_name} failed: {str(e)}") from e

    def _prepare_args(self, args: Dict) -> Dict:
        """Prepare arguments for JSON serialization"""
        processed_args = {}
        for key, value in args.items():
            if isinstance(value, bytes):
                processed_args[key] = base58.b58encode(value).decode('utf-8')
            else:
                processed_args[key] = value
        return processed_args

    async def view_function(self, contract_id: str, method_name: str, args: dict = None) -> Any:
        """Call view function on contract"""
        args_bytes = json.dumps(args or {}).encode('utf-8')
        try:
            result = await asyncio.to_thread(
                self.provider.view_call,
                contract_id,
                method_name,
                args_bytes
            )
        except Exception as e:
            logger.error(f"View function failed for {contract_id}.{method_name}: {e}")
            logger.error(f"Args were: {args}")
            raise NearConnectionError(f"Failed to call {method_name} on {contract_id}: {str(e)}") from e

        # View results come back as a list of byte values
        if isinstance(result, dict) and 'result' in result:
            return json.loads(bytes(result['result']).decode('utf-8'))
        return result
