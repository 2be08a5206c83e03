from .near_intents import NearIntentsTool
from .lending import LendingTool

__all__ = ["NearIntentsTool", "LendingTool"]
