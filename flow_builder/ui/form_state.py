"""
Flow Form State

Editable in-memory model behind the flow builder form: flow settings plus an
ordered list of email step cards. The Streamlit page keeps one instance in
session state and mutates it through the methods below; nothing here touches
the network.
"""
import uuid
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

from flow_builder.modules.flows.schemas.flow_schemas import is_number, round_half_up
from flow_builder.shared.core.constants import (
    DEFAULT_DELAY_TIMEZONE,
    DEFAULT_DELAY_UNIT,
    DEFAULT_STEP_STATUS,
)


def create_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


@dataclass
class TrackingRow:
    id: str = field(default_factory=lambda: create_id("tracking"))
    param: str = ""
    value: str = ""


@dataclass
class StepForm:
    """One email step card as the user is editing it."""
    id: str = field(default_factory=lambda: create_id("step"))
    internal_name: str = ""
    subject_line: str = ""
    preview_text: str = ""
    from_email: str = ""
    from_name: str = ""
    reply_to_email: str = ""
    cc_email: str = ""
    bcc_email: str = ""
    template_id: str = ""
    smart_sending_enabled: bool = True
    status: str = DEFAULT_STEP_STATUS
    add_tracking_params: bool = False
    tracking_rows: List[TrackingRow] = field(default_factory=list)
    delay_enabled: bool = False
    delay_value: Optional[float] = 1
    delay_unit: str = DEFAULT_DELAY_UNIT
    delay_timezone: str = DEFAULT_DELAY_TIMEZONE


# Fields the generic update_step() may set; toggles and rows have their own methods
EDITABLE_STEP_FIELDS = {
    f.name for f in fields(StepForm)
} - {"id", "add_tracking_params", "tracking_rows", "delay_enabled"}


def round_delay_value(value: Any) -> int:
    """Whole, non-negative delay for the payload; blank or non-finite input -> 0."""
    if not is_number(value):
        return 0
    return max(0, round_half_up(value))


@dataclass
class FlowFormState:
    flow_name: str = ""
    trigger_type: str = "list"
    trigger_id: str = ""
    steps: List[StepForm] = field(default_factory=lambda: [StepForm()])

    # ============================================
    # STEPS
    # ============================================

    def get_step(self, step_id: str) -> StepForm:
        for step in self.steps:
            if step.id == step_id:
                return step
        raise KeyError(f"Unknown step: {step_id}")

    def add_step(self) -> StepForm:
        step = StepForm()
        self.steps.append(step)
        return step

    def remove_step(self, step_id: str) -> bool:
        """Remove a step card. The last remaining step is never removed."""
        if len(self.steps) <= 1:
            return False
        remaining = [step for step in self.steps if step.id != step_id]
        removed = len(remaining) != len(self.steps)
        self.steps = remaining
        return removed

    def update_step(self, step_id: str, field_name: str, value: Any) -> None:
        if field_name not in EDITABLE_STEP_FIELDS:
            raise ValueError(f"Step field cannot be edited directly: {field_name}")
        setattr(self.get_step(step_id), field_name, value)

    def set_delay_enabled(self, step_id: str, enabled: bool) -> None:
        # Delay values stay in the card; to_payload() ignores them while disabled
        self.get_step(step_id).delay_enabled = bool(enabled)

    # ============================================
    # TRACKING PARAMETERS
    # ============================================

    def set_tracking_enabled(self, step_id: str, enabled: bool) -> None:
        step = self.get_step(step_id)
        step.add_tracking_params = bool(enabled)
        if enabled and not step.tracking_rows:
            step.tracking_rows.append(TrackingRow())
        if not enabled:
            step.tracking_rows = []

    def add_tracking_row(self, step_id: str) -> TrackingRow:
        row = TrackingRow()
        self.get_step(step_id).tracking_rows.append(row)
        return row

    def remove_tracking_row(self, step_id: str, row_id: str) -> None:
        step = self.get_step(step_id)
        step.tracking_rows = [row for row in step.tracking_rows if row.id != row_id]

    def update_tracking_row(self, step_id: str, row_id: str, field_name: str, value: str) -> None:
        if field_name not in ("param", "value"):
            raise ValueError(f"Tracking row has no field: {field_name}")
        for row in self.get_step(step_id).tracking_rows:
            if row.id == row_id:
                setattr(row, field_name, value)
                return
        raise KeyError(f"Unknown tracking row: {row_id}")

    # ============================================
    # SUBMISSION
    # ============================================

    def validate(self) -> Optional[str]:
        """First problem blocking submission, or None."""
        if not self.flow_name.strip():
            return "Flow name is required."

        if not self.trigger_id.strip():
            return "Enter the Klaviyo trigger identifier (list or segment ID)."

        for position, step in enumerate(self.steps, start=1):
            if not step.subject_line.strip() or not step.from_email.strip() or not step.from_name.strip():
                return f"Step {position} is missing required fields (subject, from name, or from email)."

        return None

    def to_payload(self) -> Dict[str, Any]:
        """FlowRequest-shaped body for `POST /api/flows`."""
        return {
            "flowName": self.flow_name.strip(),
            "trigger": {
                "type": self.trigger_type,
                "id": self.trigger_id.strip(),
            },
            "steps": [self._step_payload(step) for step in self.steps],
        }

    @staticmethod
    def _step_payload(step: StepForm) -> Dict[str, Any]:
        delay = None
        if step.delay_enabled:
            delay = {
                "value": round_delay_value(step.delay_value),
                "unit": step.delay_unit,
                "timezone": step.delay_timezone,
            }

        custom_tracking = []
        if step.add_tracking_params:
            for row in step.tracking_rows:
                param, value = row.param.strip(), row.value.strip()
                if param and value:
                    custom_tracking.append({"param": param, "value": value})

        return {
            "internalName": step.internal_name.strip(),
            "subjectLine": step.subject_line.strip(),
            "previewText": step.preview_text.strip(),
            "fromEmail": step.from_email.strip(),
            "fromName": step.from_name.strip(),
            "replyToEmail": (step.reply_to_email or step.from_email).strip(),
            "ccEmail": step.cc_email.strip(),
            "bccEmail": step.bcc_email.strip(),
            "templateId": step.template_id.strip(),
            "smartSendingEnabled": step.smart_sending_enabled,
            "status": step.status,
            "delay": delay,
            "customTracking": custom_tracking,
        }
