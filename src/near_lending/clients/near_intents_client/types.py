"""NEAR Intents Type Definitions"""

from typing import Any, Dict, List, Optional, TypedDict

class QuoteRequestMessage(TypedDict, total=False):
    """Serialized quote request sent to the solver bus"""
    defuse_asset_identifier_in: str
    defuse_asset_identifier_out: str
    exact_amount_in: str
    exact_amount_out: str
    min_deadline_ms: int

class RpcRequest(TypedDict):
    """JSON-RPC envelope for solver bus calls"""
    id: str
    jsonrpc: str
    method: str
    params: List[Any]

class PublishIntentResult(TypedDict, total=False):
    """Result member of a publish_intent response"""
    status: str  # "OK" | "FAILED" | ...
    intent_hash: str
    reason: str

class IntentStatusResult(TypedDict, total=False):
    """Result member of a get_status response"""
    status: str  # "PENDING" | "TX_BROADCASTED" | "SETTLED" | "NOT_FOUND_OR_NOT_VALID"
    intent_hash: str
    data: Optional[Dict[str, Any]]

class ExecutionOutcome(TypedDict, total=False):
    """Final execution outcome returned for a NEAR function call"""
    status: Dict[str, Any]  # {"SuccessValue": "<base64>"} | {"Failure": {...}}
    transaction: Dict[str, Any]
    receipts_outcome: List[Dict[str, Any]]
