"""
Flow Builder Services

Normalization, validation, definition building and the Klaviyo call.
"""

from .normalizer import normalize_payload, validate_payload
from .definition_builder import build_flow_definition
from .klaviyo_client import KlaviyoClient, KlaviyoResponse, FlowSender
from .flow_service import FlowRequestHandler, FlowOutcome, OutcomeKind

__all__ = [
    "normalize_payload",
    "validate_payload",
    "build_flow_definition",
    "KlaviyoClient",
    "KlaviyoResponse",
    "FlowSender",
    "FlowRequestHandler",
    "FlowOutcome",
    "OutcomeKind",
]
