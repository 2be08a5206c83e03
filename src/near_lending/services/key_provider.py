from abc import ABC, abstractmethod

from near_api.signer import KeyPair


class KeyProvider(ABC):
    """Source of signing key material for NEAR accounts"""

    @abstractmethod
    async def get_key_pair(self, account_id: str) -> KeyPair:
        """Return the key pair for ``account_id``.

        Raises:
            KeyRetrievalError: no key is available for the account
        """
