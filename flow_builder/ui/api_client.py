"""
Form submission client: posts the form payload to the flow builder API and
reduces the reply to what the form shows (flow summary or error + details).
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from flow_builder.shared.core.config import settings
from flow_builder.shared.core.constants import TIMEOUT_FORM_SUBMIT

logger = logging.getLogger("flow_form_client")

DEFAULT_REJECTED_MESSAGE = "The Klaviyo API returned an error. Review the details and try again."
DEFAULT_FAILURE_MESSAGE = "Unexpected error creating Klaviyo flow."


@dataclass
class SubmissionResult:
    ok: bool
    status_code: Optional[int] = None
    flow_id: Optional[str] = None
    flow_name: Optional[str] = None
    error: Optional[str] = None
    details: Any = None

    @property
    def has_summary(self) -> bool:
        return bool(self.flow_id)

    @property
    def details_text(self) -> Optional[str]:
        """Pretty-printed diagnostics for the raw response panel."""
        if self.details is None:
            return None
        try:
            return json.dumps(self.details, indent=2)
        except (TypeError, ValueError):
            return str(self.details)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def submit_flow(
    payload: Dict[str, Any],
    api_url: Optional[str] = None,
    session: Optional[requests.Session] = None,
    timeout: float = TIMEOUT_FORM_SUBMIT,
) -> SubmissionResult:
    """
    POST one flow payload. Never raises for HTTP or network problems and never
    retries; the user resubmits manually.
    """
    http = session or requests
    url = api_url or settings.FLOW_API_URL

    try:
        response = http.post(url, json=payload, timeout=timeout)
    except requests.RequestException as e:
        logger.error(f"Flow submission did not reach {url}: {e}")
        return SubmissionResult(ok=False, error=str(e) or DEFAULT_FAILURE_MESSAGE)

    try:
        body = _as_dict(response.json())
    except ValueError:
        logger.error(f"Non-JSON reply from {url} (HTTP {response.status_code})")
        return SubmissionResult(
            ok=False,
            status_code=response.status_code,
            error=DEFAULT_FAILURE_MESSAGE,
            details=response.text or None,
        )

    if not response.ok:
        return SubmissionResult(
            ok=False,
            status_code=response.status_code,
            error=body.get("error") or DEFAULT_REJECTED_MESSAGE,
            details=body.get("details"),
        )

    flow = _as_dict(_as_dict(body.get("data")).get("data"))
    attributes = _as_dict(flow.get("attributes"))

    return SubmissionResult(
        ok=True,
        status_code=response.status_code,
        flow_id=flow.get("id"),
        flow_name=attributes.get("name") or payload.get("flowName"),
        details=body.get("details"),
    )
