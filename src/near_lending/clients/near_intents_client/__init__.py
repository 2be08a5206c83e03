"""NEAR Intents Client Package"""

from .client import NearIntentsClient
from .account import IntentAccount
from .intent import (
    Asset,
    IntentRequest,
    IntentMessage,
    TokenDiffIntent,
    FtWithdrawIntent,
    QuoteOption,
    SignedIntent,
    PublishIntent,
    PublishResult
)
from .operations import IntentOperations, select_best_quote
from .orchestrator import SwapOrchestrator, SwapOutcome, SwapState, withdrawal_amount
from .signer import IntentSigner, serialize_intent
from .exceptions import (
    NearIntentsError,
    NearConnectionError,
    IntentExecutionError,
    ValidationError,
    ConfigurationError,
    KeyRetrievalError,
    TokenSupportError
)

__version__ = "0.1.0"

__all__ = [
    "NearIntentsClient",
    "IntentAccount",
    "Asset",
    "IntentRequest",
    "IntentMessage",
    "TokenDiffIntent",
    "FtWithdrawIntent",
    "QuoteOption",
    "SignedIntent",
    "PublishIntent",
    "PublishResult",
    "IntentOperations",
    "select_best_quote",
    "SwapOrchestrator",
    "SwapOutcome",
    "SwapState",
    "withdrawal_amount",
    "IntentSigner",
    "serialize_intent",
    "NearIntentsError",
    "NearConnectionError",
    "IntentExecutionError",
    "ValidationError",
    "ConfigurationError",
    "KeyRetrievalError",
    "TokenSupportError",
]
