"""NEAR Intents Utility Functions"""

import base64
import re
import secrets
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from fractions import Fraction
from typing import Optional, Dict, Any, Union

from .config import ASSET_MAP, INTENT_DEADLINE_DAYS
from .exceptions import ValidationError, TokenSupportError

_AMOUNT_PATTERN = re.compile(r'^(\d+(\.\d*)?|\.\d+)$')


def validate_token_support(token: str) -> Dict[str, Any]:
    """Return the asset config for a token or raise if it is unknown"""
    if token not in ASSET_MAP:
        raise TokenSupportError(token)
    return ASSET_MAP[token]


def validate_swap_pair(token_in: str, token_out: str) -> None:
    """Both tokens must be supported and distinct"""
    validate_token_support(token_in)
    validate_token_support(token_out)
    if get_asset_id(token_in) == get_asset_id(token_out):
        raise ValidationError(f"Cannot swap {token_in} for {token_out}: same asset")


def get_asset_id(token: str) -> str:
    """Format token ID for intent protocol"""
    return f"nep141:{validate_token_support(token)['token_id']}"


def to_decimals(amount: Union[str, int, Decimal], decimals: int) -> str:
    """Convert a human decimal amount to base units without floating point.

    ``"1.5"`` with 24 decimals gives ``"1500000000000000000000000"``. Leading
    zeros are stripped and a zero amount gives ``"0"``.
    """
    text = str(amount).strip()
    if not _AMOUNT_PATTERN.match(text):
        raise ValidationError(f"Invalid amount: {amount!r}")

    whole, _, fraction = text.partition('.')
    if len(fraction) > decimals:
        if fraction[decimals:].strip('0'):
            raise ValidationError(
                f"Amount {text} has more than {decimals} fractional digits"
            )
        fraction = fraction[:decimals]

    base = whole + fraction.ljust(decimals, '0')
    return base.lstrip('0') or '0'


def from_decimals(amount: Optional[str], decimals: int) -> Optional[Decimal]:
    """Convert base units to a human-readable Decimal"""
    if amount is None:
        return None
    return Decimal(f"{int(amount)}E-{decimals}")


def apply_slippage(amount: str, slippage: Union[Decimal, str]) -> str:
    """Reduce a base-unit amount by a slippage fraction, rounding down"""
    tolerance = Fraction(str(slippage))
    if not 0 <= tolerance < 1:
        raise ValidationError(f"Slippage must be in [0, 1): {slippage}")
    kept = 1 - tolerance
    return str(int(amount) * kept.numerator // kept.denominator)


def generate_nonce() -> str:
    """Fresh random 32-byte nonce, base64 encoded"""
    return base64.b64encode(secrets.token_bytes(32)).decode('utf-8')


def get_future_deadline(days: int = INTENT_DEADLINE_DAYS, now: Optional[datetime] = None) -> str:
    """Generate an ISO-8601 UTC deadline ``days`` in the future"""
    if days <= 0:
        raise ValidationError("Deadline must be in the future")
    future_date = (now or datetime.now(timezone.utc)) + timedelta(days=days)
    return future_date.strftime("%Y-%m-%dT%H:%M:%S.") + f"{future_date.microsecond // 1000:03d}Z"
