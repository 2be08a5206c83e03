"""Lending backend configuration"""

import logging
import os
from dotenv import load_dotenv

load_dotenv()

# Operator account
NEAR_ACCOUNT_ID = os.getenv('NEAR_ACCOUNT_ID')
NEAR_PRIVATE_KEY = os.getenv('NEAR_PRIVATE_KEY')
KEY_VAULT_SECRET = os.getenv('KEY_VAULT_SECRET')

# Lending contract
LENDING_CONTRACT = os.getenv('LENDING_CONTRACT')
DEFAULT_GAS = 30 * 10**12

# Explorer APIs
PIKESPEAK_API_URL = os.getenv('PIKESPEAK_API_URL', 'https://pikespeak.ai')
NEARBLOCKS_API_URL = os.getenv('NEARBLOCKS_API_URL', 'https://api.nearblocks.io')

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

if not PIKESPEAK_API_URL:
    raise ValueError("PIKESPEAK_API_URL must be set in environment or use default")

if not NEARBLOCKS_API_URL:
    raise ValueError("NEARBLOCKS_API_URL must be set in environment or use default")


def configure_logging(level: str = None) -> None:
    """Configure root logging for the backend"""
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )
