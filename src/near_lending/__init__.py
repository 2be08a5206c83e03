"""NEAR lending backend: intent swaps, lending contract and credit scoring"""

__version__ = "0.1.0"
