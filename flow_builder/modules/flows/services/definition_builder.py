"""
Klaviyo Flow Definition Builder

Maps a normalized `FlowRequest` onto the `definition` object accepted by
Klaviyo's create-flow endpoint:

    triggers        -> [{"type": "list" | "segment", "id": ...}]
    actions         -> flat list of action nodes, chained by `links.next`
    entry_action_id -> temporary_id of the first action

Each email step contributes an optional `time-delay` action followed by a
`send-email` action. Temporary IDs are `action_1`, `action_2`, ... in the order
the actions run; the last action links to None.
"""
from typing import Any, Dict, List, Optional

from flow_builder.modules.flows.schemas.flow_schemas import Delay, EmailStep, FlowRequest
from flow_builder.shared.core.constants import ALL_WEEKDAYS
from flow_builder.shared.utils.exceptions import FlowDefinitionError


def _temporary_id(index: int) -> str:
    return f"action_{index}"


def _or_none(value: str) -> Optional[str]:
    return value or None


def build_delay_action(delay: Delay) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "unit": delay.unit,
        "value": delay.value,
        "timezone": delay.timezone,
    }
    if delay.unit == "days":
        data["delay_until_weekdays"] = list(ALL_WEEKDAYS)
    else:
        data["secondary_value"] = 0

    return {"type": "time-delay", "data": data}


def build_tracking_params(step: EmailStep, step_number: int) -> List[Dict[str, str]]:
    """Convert a step's tracking rows, rejecting a parameter set twice."""
    seen = set()
    params = []
    for row in step.custom_tracking:
        if row.param in seen:
            raise FlowDefinitionError(
                f"Step {step_number} has duplicate tracking parameter '{row.param}'.",
                step_number=step_number,
            )
        seen.add(row.param)
        params.append({"name": row.param, "value": row.value})
    return params


def build_email_action(step: EmailStep, step_number: int) -> Dict[str, Any]:
    tracking_params = build_tracking_params(step, step_number)

    return {
        "type": "send-email",
        "data": {
            "message": {
                "from_email": step.from_email,
                "from_label": step.from_name,
                "reply_to_email": step.reply_to_email or step.from_email,
                "cc_email": _or_none(step.cc_email),
                "bcc_email": _or_none(step.bcc_email),
                "subject_line": step.subject_line,
                "preview_text": step.preview_text,
                "template_id": _or_none(step.template_id),
                "smart_sending_enabled": step.smart_sending_enabled,
                "add_tracking_params": bool(tracking_params),
                "custom_tracking_params": tracking_params,
                "name": step.internal_name or f"Email #{step_number}",
            },
            "status": step.status,
        },
    }


def build_flow_definition(payload: FlowRequest) -> Dict[str, Any]:
    """
    Build the Klaviyo flow definition for a validated request.

    Raises:
        FlowDefinitionError: the request describes something the definition
            format cannot express.
    """
    if not payload.steps:
        raise FlowDefinitionError("A flow definition needs at least one email step.")

    actions: List[Dict[str, Any]] = []
    for step_number, step in enumerate(payload.steps, start=1):
        if step.delay is not None:
            actions.append(build_delay_action(step.delay))
        actions.append(build_email_action(step, step_number))

    # Number and chain the actions in execution order
    for index, action in enumerate(actions, start=1):
        action["temporary_id"] = _temporary_id(index)
        action["links"] = {
            "next": _temporary_id(index + 1) if index < len(actions) else None
        }

    return {
        "triggers": [
            {"type": payload.trigger.type, "id": payload.trigger.id}
        ],
        "profile_filter": None,
        "actions": actions,
        "entry_action_id": actions[0]["temporary_id"],
    }
