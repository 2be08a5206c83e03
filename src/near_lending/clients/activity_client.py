"""Account activity from the pikespeak.ai and nearblocks.io explorer APIs"""

import logging
from typing import Any, Dict, List, Optional

import aiohttp

from ..config import NEARBLOCKS_API_URL, PIKESPEAK_API_URL
from .near_intents_client.exceptions import NearConnectionError

logger = logging.getLogger(__name__)


class ActivityClient:
    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        pikespeak_url: str = PIKESPEAK_API_URL,
        nearblocks_url: str = NEARBLOCKS_API_URL
    ):
        self.session = session
        self._owns_session = session is None
        self.pikespeak_url = pikespeak_url.rstrip('/')
        self.nearblocks_url = nearblocks_url.rstrip('/')

    async def close(self) -> None:
        if self.session and self._owns_session:
            await self.session.close()
        self.session = None

    async def _get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        if self.session is None:
            self.session = aiohttp.ClientSession()
            self._owns_session = True
        try:
            async with self.session.get(url, params=params) as response:
                if response.status != 200:
                    text = await response.text()
                    raise NearConnectionError(f"GET {url} failed with status {response.status}: {text}")
                return await response.json()
        except aiohttp.ClientError as e:
            logger.error(f"GET {url} failed: {e}")
            raise NearConnectionError(f"GET {url} failed: {e}") from e

    async def get_transfers(self, account_id: str) -> List[Dict[str, Any]]:
        """Per-counterparty transfer totals: ``account``, ``totalIn``, ``totalOut``"""
        return await self._get_json(f"{self.pikespeak_url}/api/graph/near-transfer/{account_id}") or []

    async def get_account_info(self, account_id: str) -> Dict[str, Any]:
        """Account metadata including ``timestamp_creation`` and ``timestamp_deletion``"""
        return await self._get_json(f"{self.pikespeak_url}/api/infos/{account_id}") or {}

    async def get_activities(self, account_id: str) -> List[Dict[str, Any]]:
        """All account activities, following the nearblocks cursor"""
        url = f"{self.nearblocks_url}/v1/account/{account_id}/activities"
        activities: List[Dict[str, Any]] = []
        cursor = None
        while True:
            data = await self._get_json(url, params={"cursor": cursor} if cursor else None)
            activities.extend(data.get('activities') or [])
            cursor = data.get('cursor')
            if not cursor:
                return activities
