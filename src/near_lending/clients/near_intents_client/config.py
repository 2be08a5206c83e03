"""NEAR Intents Configuration"""

import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()

# Endpoints
INTENT_CONTRACT = os.getenv('INTENT_CONTRACT', 'intents.near')
SOLVER_BUS_URL = os.getenv('SOLVER_BUS_URL', 'https://solver-relay-v2.chaindefuser.com/rpc')
NEAR_RPC_URL = os.getenv('NEAR_RPC_URL', 'https://rpc.mainnet.near.org')
MAX_GAS = 300 * 10**12

# Intent Configuration
INTENT_REFERRAL = os.getenv('INTENT_REFERRAL', 'near-intents.intents-referral.near')
INTENT_DEADLINE_DAYS = int(os.getenv('INTENT_DEADLINE_DAYS', '30'))
QUOTE_MIN_DEADLINE_MS = int(os.getenv('QUOTE_MIN_DEADLINE_MS', '60000'))
SIGNING_STANDARD = "raw_ed25519"

# Swap Configuration
NATIVE_ASSET = 'NEAR'
DEFAULT_SLIPPAGE = Decimal(os.getenv('SWAP_SLIPPAGE', '0.05'))

# Asset Configuration
ASSET_MAP = {
    'USDC': {
        'token_id': '17208628f84f5d6ad33f0da3bbbeb27ffcb398eac501a31bd6ad2011e36133a1',
        'omft': 'eth-0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48.omft.near',
        'decimals': 6,
    },
    'USDT': {
        'token_id': 'eth-0xdac17f958d2ee523a2206206994597c13d831ec7.omft.near',
        'omft': 'eth-0xdac17f958d2ee523a2206206994597c13d831ec7.omft.near',
        'decimals': 6,
    },
    'ZCASH': {
        'token_id': 'zec.omft.near',
        'omft': 'zec.omft.near',
        'decimals': 8,
    },
    'ETH': {
        'token_id': 'eth.omft.near',
        'omft': 'eth.omft.near',
        'decimals': 18,
    },
    'NEAR': {
        'token_id': 'wrap.near',
        'decimals': 24,
    }
}

# Validation
if not SOLVER_BUS_URL:
    raise ValueError("SOLVER_BUS_URL must be set in environment or use default")

if not NEAR_RPC_URL:
    raise ValueError("NEAR_RPC_URL must be set in environment or use default")

if not INTENT_CONTRACT:
    raise ValueError("INTENT_CONTRACT must be set in environment or use default")

if not Decimal('0') <= DEFAULT_SLIPPAGE < Decimal('1'):
    raise ValueError("SWAP_SLIPPAGE must be a fraction between 0 and 1")
