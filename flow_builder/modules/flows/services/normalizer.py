"""
Flow Request Normalization and Validation

Both functions are pure: they never touch the network and never mutate their
input. `validate_payload` must only be given the output of `normalize_payload`.
"""
import logging
from typing import Any, Optional

from flow_builder.modules.flows.schemas.flow_schemas import FlowRequest
from flow_builder.shared.core.constants import TRIGGER_TYPES

logger = logging.getLogger("flow_normalizer")


def normalize_payload(raw: Any) -> FlowRequest:
    """
    Trim, coerce and filter a decoded JSON body into a `FlowRequest`.

    Raises:
        pydantic.ValidationError: the body cannot be shaped into a flow request
            at all (not an object, `steps` is not a list, ...).
    """
    if isinstance(raw, FlowRequest):
        return raw
    return FlowRequest.model_validate(raw)


def validate_payload(payload: FlowRequest) -> Optional[str]:
    """
    Check a normalized flow request.

    Returns the first violation as a user-facing message, or None when the
    request is valid. Steps are named by their 1-based position.
    """
    if not payload.flow_name:
        return "Flow name is required."

    if payload.trigger.type not in TRIGGER_TYPES:
        return "Unsupported trigger type. Only list and segment triggers are supported."

    if not payload.trigger.id:
        return "Trigger identifier is required."

    if not payload.steps:
        return "At least one email step is required."

    for position, step in enumerate(payload.steps, start=1):
        if not step.subject_line or not step.from_email or not step.from_name:
            logger.debug(f"Step {position} failed required-field check")
            return f"Step {position} is missing subject, from name, or from email."

    return None
