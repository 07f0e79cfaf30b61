"""
Flow Builder Schemas
"""

from .flow_schemas import (
    FlowRequest,
    Trigger,
    EmailStep,
    Delay,
    TrackingParam,
    FlowCreatedResponse,
    FlowErrorResponse,
)

__all__ = [
    "FlowRequest",
    "Trigger",
    "EmailStep",
    "Delay",
    "TrackingParam",
    "FlowCreatedResponse",
    "FlowErrorResponse",
]
