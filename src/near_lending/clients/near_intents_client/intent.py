from typing import List, Dict, Any, Optional, Union, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import ASSET_MAP, QUOTE_MIN_DEADLINE_MS, SIGNING_STANDARD
from .types import QuoteRequestMessage
from .utils import get_asset_id, to_decimals, validate_token_support


class Asset(BaseModel):
    """Configured asset"""
    model_config = ConfigDict(frozen=True)

    symbol: str
    token_id: str
    decimals: int
    omft: Optional[str] = None

    @classmethod
    def from_symbol(cls, symbol: str) -> 'Asset':
        info = validate_token_support(symbol)
        return cls(symbol=symbol, **info)

    @property
    def asset_id(self) -> str:
        return f"nep141:{self.token_id}"


class IntentRequest:
    """Quote request for the solver bus"""

    def __init__(self, min_deadline_ms: int = QUOTE_MIN_DEADLINE_MS):
        self.min_deadline_ms = min_deadline_ms
        self._asset_in = None
        self._asset_out = None

    def asset_in(self, asset_name: str, amount: str) -> 'IntentRequest':
        """Set input asset"""
        self._asset_in = {
            "asset": get_asset_id(asset_name),
            "amount": to_decimals(amount, ASSET_MAP[asset_name]['decimals'])
        }
        return self

    def asset_out(self, asset_name: str, amount: Optional[str] = None) -> 'IntentRequest':
        """Set output asset, leave amount empty to solve for the best output"""
        self._asset_out = {
            "asset": get_asset_id(asset_name),
            "amount": to_decimals(amount, ASSET_MAP[asset_name]['decimals']) if amount is not None else None
        }
        return self

    @property
    def exact_amount_in(self) -> Optional[str]:
        return self._asset_in["amount"] if self._asset_in else None

    def serialize(self) -> QuoteRequestMessage:
        """Serialize request for solver"""
        if not self._asset_in or not self._asset_out:
            raise ValueError("Both asset_in and asset_out must be set")

        message = {
            "defuse_asset_identifier_in": self._asset_in["asset"],
            "defuse_asset_identifier_out": self._asset_out["asset"],
            "exact_amount_in": self._asset_in["amount"],
            "exact_amount_out": self._asset_out["amount"],
            "min_deadline_ms": self.min_deadline_ms,
        }

        if self._asset_in["amount"] is None:
            del message["exact_amount_in"]
        if self._asset_out["amount"] is None:
            del message["exact_amount_out"]

        return message


class QuoteOption(BaseModel):
    """Quote returned by a solver"""
    model_config = ConfigDict(extra='allow')

    amount_out: str
    quote_hash: str

    @field_validator('amount_out', mode='before')
    @classmethod
    def _integer_amount(cls, value: Any) -> str:
        text = str(value)
        if not text.isdigit():
            raise ValueError(f"amount_out must be an integer string, got {value!r}")
        return text


class TokenDiffIntent(BaseModel):
    intent: Literal["token_diff"] = "token_diff"
    diff: Dict[str, str]
    referral: Optional[str] = None


class FtWithdrawIntent(BaseModel):
    intent: Literal["ft_withdraw"] = "ft_withdraw"
    token: str
    receiver_id: str
    amount: str
    memo: Optional[str] = None


class IntentMessage(BaseModel):
    """Intent document covered by the signature"""
    signer_id: str
    nonce: str
    verifying_contract: str
    deadline: str
    intents: List[Union[TokenDiffIntent, FtWithdrawIntent]] = Field(min_length=1)


class SignedIntent(BaseModel):
    """Signed intent payload"""
    standard: str = SIGNING_STANDARD
    payload: str
    signature: str
    public_key: str


class PublishIntent(BaseModel):
    """Model for publishing intents"""
    signed_data: SignedIntent
    quote_hashes: List[str] = []


class PublishResult(BaseModel):
    """Outcome of a publish_intent call"""
    ok: bool
    status: str
    intent_hash: Optional[str] = None
    error: Optional[str] = None
