import base64
import json
import logging
import secrets
import time
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from near_api.signer import KeyPair
from typing import Optional, Dict

from ..clients.near_intents_client.exceptions import KeyRetrievalError
from .key_provider import KeyProvider

logger = logging.getLogger(__name__)

class KeyVaultService(KeyProvider):
    def __init__(self, encryption_key: Optional[str] = None, salt: bytes = None):
        """Initialize key vault with encryption

        Args:
            encryption_key: Master key for encrypting stored keys, a random
                per-process secret is used when omitted
            salt: Optional salt for key derivation
        """
        self.salt = salt or b'near_lending_salt'
        self.storage: Dict[str, Dict] = {}

        # Derive encryption key using PBKDF2
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=self.salt,
            iterations=100000,
        )
        secret = encryption_key or secrets.token_urlsafe(32)
        key = base64.urlsafe_b64encode(kdf.derive(secret.encode()))
        self.fernet = Fernet(key)

    async def store_key(self, account_id: str, key_data: Dict, expiry_seconds: Optional[int] = None) -> None:
        """Encrypt and store key data

        Args:
            account_id: NEAR account the key signs for
            key_data: Dictionary containing at least ``private_key``
            expiry_seconds: Seconds until key expires, never when omitted
        """
        if 'private_key' not in key_data:
            raise ValueError("key_data must contain private_key")
        self.storage[account_id] = {
            'data': self.fernet.encrypt(json.dumps(key_data).encode()),
            'expiry': int(time.time()) + expiry_seconds if expiry_seconds else None
        }
        logger.info(f"Stored encrypted key for account: {account_id}")

    async def retrieve_key(self, account_id: str) -> Optional[Dict]:
        """Retrieve and decrypt key if not expired"""
        encrypted_data = self.storage.get(account_id)
        if not encrypted_data:
            return None

        # Check expiration
        expiry = encrypted_data['expiry']
        if expiry is not None and time.time() > expiry:
            await self.delete_key(account_id)
            return None

        try:
            decrypted = self.fernet.decrypt(encrypted_data['data'])
        except InvalidToken:
            logger.error(f"Stored key for account {account_id} could not be decrypted")
            return None
        return json.loads(decrypted)

    async def delete_key(self, account_id: str) -> bool:
        """Remove key from storage"""
        if account_id in self.storage:
            del self.storage[account_id]
            logger.info(f"Deleted key for account: {account_id}")
            return True
        return False

    async def get_key_pair(self, account_id: str) -> KeyPair:
        key_data = await self.retrieve_key(account_id)
        if not key_data:
            raise KeyRetrievalError(account_id)
        return KeyPair(key_data['private_key'])
