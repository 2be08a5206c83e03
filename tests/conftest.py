"""Pytest configuration and fixtures."""

import json
import logging
from typing import Any, List, Optional

import base58
import pytest
import pytest_asyncio
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from near_lending.clients.near_intents_client import IntentAccount, NearIntentsClient
from near_lending.config import configure_logging
from near_lending.services.key_vault_service import KeyVaultService

configure_logging("DEBUG")
logger = logging.getLogger(__name__)

ACCOUNT_ID = "operator.near"


class FakeResponse:
    """Stand-in for an aiohttp response used as an async context manager"""

    def __init__(self, payload: Any, status: int = 200):
        self.payload = payload
        self.status = status

    async def text(self) -> str:
        if isinstance(self.payload, str):
            return self.payload
        return json.dumps(self.payload)

    async def json(self) -> Any:
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    """Records requests and replays queued responses or exceptions"""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.requests: List[dict] = []
        self.closed = False

    def queue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    def _next(self, request: dict):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url, headers=None, json=None):
        return self._next({"method": "POST", "url": url, "json": json})

    def get(self, url, params=None):
        return self._next({"method": "GET", "url": url, "params": params})

    async def close(self):
        self.closed = True

    def rpc_params(self, index: int) -> Any:
        return self.requests[index]["json"]["params"][0]


def rpc_response(result: Any) -> FakeResponse:
    return FakeResponse({"jsonrpc": "2.0", "id": "dontcare", "result": result})


@pytest.fixture
def private_key():
    """Fresh ed25519 key in NEAR ``ed25519:<base58(seed + public)>`` form"""
    key = Ed25519PrivateKey.generate()
    seed = key.private_bytes(
        serialization.Encoding.Raw,
        serialization.PrivateFormat.Raw,
        serialization.NoEncryption()
    )
    public = key.public_key().public_bytes(serialization.Encoding.Raw, serialization.PublicFormat.Raw)
    return "ed25519:" + base58.b58encode(seed + public).decode("utf-8"), key.public_key()


@pytest_asyncio.fixture
async def key_vault(private_key):
    vault = KeyVaultService("test-secret")
    await vault.store_key(ACCOUNT_ID, {"account_id": ACCOUNT_ID, "private_key": private_key[0]})
    return vault


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def account(key_vault):
    return IntentAccount(ACCOUNT_ID, key_vault)


@pytest.fixture
def client(account, session):
    return NearIntentsClient(account, session=session)
