"""
Flow Builder - Pydantic Schemas

Request records for `POST /api/flows`. Validating raw JSON into these models
IS the normalization step: every "before" validator below trims, coerces or
drops input so that a `FlowRequest` instance is always in normalized form.
Normalizing an already-normalized payload yields an equal model.
"""
import math
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from flow_builder.shared.core.constants import (
    STEP_STATUSES,
    DELAY_UNITS,
    DEFAULT_STEP_STATUS,
    DEFAULT_DELAY_UNIT,
    DEFAULT_DELAY_TIMEZONE,
)

StepStatus = Literal["draft", "live", "manual", "disabled"]
DelayUnit = Literal["minutes", "hours", "days"]


# ============================================
# COERCION HELPERS
# ============================================

def clean_text(value: Any) -> str:
    """None -> "", anything else -> stripped string."""
    if value is None:
        return ""
    return str(value).strip()


def is_number(value: Any) -> bool:
    """Real JSON number: int or finite float, never a boolean."""
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, int)


def round_half_up(value: Any) -> int:
    """
    Nearest whole number, halves rounding up (2.5 -> 3).
    Ints of any size pass through untouched.
    """
    if isinstance(value, int):
        return value
    return int(math.floor(value + 0.5))


def js_truthy(value: Any) -> bool:
    """Truthiness as the browser form sees it: empty lists/objects are true, NaN is false."""
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, float):
        return not math.isnan(value) and value != 0
    if isinstance(value, (int, str)):
        return bool(value)
    return True


def coerce_delay_value(value: Any) -> Optional[int]:
    """
    Whole-number delay for a raw value, or None when no delay should be kept.

    Only real numbers count (booleans and numeric strings do not). The value is
    rounded half-up and must come out at 1 or more.
    """
    if not is_number(value) or value <= 0:
        return None
    rounded = max(0, round_half_up(value))
    return rounded if rounded >= 1 else None


class FlowModel(BaseModel):
    """Base for flow records: camelCase on the wire, immutable once built."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ============================================
# REQUEST MODELS
# ============================================

class TrackingParam(FlowModel):
    """One custom UTM-style tracking parameter attached to an email step."""
    param: str
    value: str

    @field_validator("param", "value", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> str:
        return clean_text(v)


class Delay(FlowModel):
    """Wait inserted before an email step is sent."""
    value: int = Field(..., ge=1)
    unit: DelayUnit = DEFAULT_DELAY_UNIT
    timezone: str = DEFAULT_DELAY_TIMEZONE

    @field_validator("value", mode="before")
    @classmethod
    def round_value(cls, v: Any) -> Any:
        if isinstance(v, float) and math.isfinite(v):
            return max(0, round_half_up(v))
        return v

    @field_validator("unit", mode="before")
    @classmethod
    def normalize_unit(cls, v: Any) -> str:
        unit = clean_text(v)
        return unit if unit in DELAY_UNITS else DEFAULT_DELAY_UNIT

    @field_validator("timezone", mode="before")
    @classmethod
    def default_timezone(cls, v: Any) -> str:
        return clean_text(v) or DEFAULT_DELAY_TIMEZONE


class EmailStep(FlowModel):
    """One send-email action in the flow, optionally preceded by a delay."""
    internal_name: str = ""
    subject_line: str = ""
    preview_text: str = ""
    from_email: str = ""
    from_name: str = ""
    reply_to_email: str = ""
    cc_email: str = ""
    bcc_email: str = ""
    template_id: str = ""
    smart_sending_enabled: bool = False
    status: StepStatus = DEFAULT_STEP_STATUS
    delay: Optional[Delay] = None
    custom_tracking: List[TrackingParam] = Field(default_factory=list)

    @field_validator(
        "internal_name", "subject_line", "preview_text", "from_email", "from_name",
        "reply_to_email", "cc_email", "bcc_email", "template_id",
        mode="before",
    )
    @classmethod
    def strip_text(cls, v: Any) -> str:
        return clean_text(v)

    @field_validator("smart_sending_enabled", mode="before")
    @classmethod
    def truthy(cls, v: Any) -> bool:
        return js_truthy(v)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> str:
        status = clean_text(v)
        return status if status in STEP_STATUSES else DEFAULT_STEP_STATUS

    @field_validator("delay", mode="before")
    @classmethod
    def keep_positive_delay(cls, v: Any) -> Any:
        if isinstance(v, Delay):
            return v
        if not isinstance(v, dict):
            return None
        value = coerce_delay_value(v.get("value"))
        if value is None:
            return None
        return {
            "value": value,
            "unit": v.get("unit"),
            "timezone": v.get("timezone"),
        }

    @field_validator("custom_tracking", mode="before")
    @classmethod
    def drop_incomplete_rows(cls, v: Any) -> List[Dict[str, str]]:
        if not isinstance(v, list):
            return []
        rows = []
        for row in v:
            if isinstance(row, TrackingParam):
                param, value = row.param, row.value
            elif isinstance(row, dict):
                param, value = clean_text(row.get("param")), clean_text(row.get("value"))
            else:
                continue
            if param and value:
                rows.append({"param": param, "value": value})
        return rows


class Trigger(FlowModel):
    """List or segment whose membership starts the flow."""
    type: str = ""
    id: str = ""

    @field_validator("type", "id", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> str:
        return clean_text(v)


class FlowRequest(FlowModel):
    """Body of `POST /api/flows`."""
    flow_name: str = ""
    trigger: Trigger = Field(default_factory=Trigger)
    steps: List[EmailStep] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "flowName": "Welcome",
                "trigger": {"type": "list", "id": "ABC123"},
                "steps": [
                    {
                        "subjectLine": "Hi there",
                        "fromEmail": "team@example.com",
                        "fromName": "Team",
                        "smartSendingEnabled": True,
                        "status": "draft",
                        "delay": None,
                        "customTracking": [{"param": "utm_source", "value": "klaviyo"}]
                    }
                ]
            }
        }
    )

    @field_validator("flow_name", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> str:
        return clean_text(v)

    @field_validator("trigger", mode="before")
    @classmethod
    def default_trigger(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("steps", mode="before")
    @classmethod
    def default_steps(cls, v: Any) -> Any:
        return [] if v is None else v


# ============================================
# RESPONSE MODELS
# ============================================

class FlowCreatedResponse(BaseModel):
    """Klaviyo's create-flow response, passed through untouched."""
    data: Any = None


class FlowErrorResponse(BaseModel):
    """Uniform error body; `details` carries parser output or Klaviyo's error document."""
    error: str
    details: Optional[Any] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Step 2 is missing subject, from name, or from email."
            }
        }
    )
