"""
Flow Request Handler

Runs one submission through the fixed pipeline

    config check -> parse -> normalize -> validate -> build -> call Klaviyo

and turns whichever stage ends it into a `FlowOutcome` (HTTP status + JSON
body). Every outcome is terminal; nothing is retried.
"""
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import ValidationError

from flow_builder.modules.flows.services.definition_builder import build_flow_definition
from flow_builder.modules.flows.services.klaviyo_client import FlowSender, KlaviyoClient
from flow_builder.modules.flows.services.normalizer import normalize_payload, validate_payload
from flow_builder.shared.core.constants import (
    ERROR_BUILD_FAILED,
    ERROR_INVALID_JSON,
    ERROR_INVALID_SHAPE,
    ERROR_MISSING_API_KEY,
    ERROR_PROVIDER_REJECTED,
    ERROR_PROVIDER_UNREACHABLE,
)
from flow_builder.shared.utils.exceptions import FlowDefinitionError

logger = logging.getLogger("flow_service")


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    CONFIG_ERROR = "config_error"
    CLIENT_ERROR = "client_error"
    GATEWAY_ERROR = "gateway_error"
    PROVIDER_ERROR = "provider_error"


@dataclass
class FlowOutcome:
    """Terminal result of one submission, ready to be sent as JSON."""
    kind: OutcomeKind
    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def error(
        cls,
        kind: OutcomeKind,
        status_code: int,
        message: str,
        details: Optional[Any] = None,
    ) -> "FlowOutcome":
        body: Dict[str, Any] = {"error": message}
        if details is not None:
            body["details"] = details
        return cls(kind=kind, status_code=status_code, body=body)


class FlowRequestHandler:
    """
    Authoritative server-side handling of a flow submission.

    The API key is fixed at construction. When no sender is given a
    `KlaviyoClient` using that key is created on first use.
    """

    def __init__(self, api_key: str, sender: Optional[FlowSender] = None):
        self.api_key = api_key
        self._sender = sender

    @property
    def sender(self) -> FlowSender:
        if self._sender is None:
            self._sender = KlaviyoClient(api_key=self.api_key)
        return self._sender

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def handle(self, raw_body: bytes) -> FlowOutcome:
        """
        Process one raw request body.

        Returns:
            FlowOutcome:
              200 success        {"data": <Klaviyo response>}
              400 client error   parse/shape/validation/build failure
              500 config error   no API key configured
              502 gateway error  Klaviyo unreachable
              4xx/5xx relayed    Klaviyo rejected the flow
        """
        # 1. Configuration (checked before the body is looked at)
        if not self.is_configured():
            logger.error("Rejecting flow submission: KLAVIYO_API_KEY is not set")
            return FlowOutcome.error(OutcomeKind.CONFIG_ERROR, 500, ERROR_MISSING_API_KEY)

        # 2. Parse
        try:
            raw = json.loads(raw_body)
        except (ValueError, RecursionError) as e:
            logger.warning(f"Invalid JSON body: {e}")
            return FlowOutcome.error(OutcomeKind.CLIENT_ERROR, 400, ERROR_INVALID_JSON, str(e))

        # 3. Normalize
        try:
            payload = normalize_payload(raw)
        except ValidationError as e:
            logger.warning(f"Body is not a flow request: {e.error_count()} error(s)")
            details = e.errors(include_url=False, include_context=False, include_input=False)
            return FlowOutcome.error(OutcomeKind.CLIENT_ERROR, 400, ERROR_INVALID_SHAPE, details)

        # 4. Validate
        validation_error = validate_payload(payload)
        if validation_error:
            logger.info(f"Flow '{payload.flow_name}' failed validation: {validation_error}")
            return FlowOutcome.error(OutcomeKind.CLIENT_ERROR, 400, validation_error)

        # 5. Build
        try:
            definition = build_flow_definition(payload)
        except FlowDefinitionError as e:
            logger.info(f"Flow '{payload.flow_name}' could not be built: {e}")
            return FlowOutcome.error(OutcomeKind.CLIENT_ERROR, 400, str(e) or ERROR_BUILD_FAILED)

        logger.info(
            f"Creating flow '{payload.flow_name}' "
            f"({payload.trigger.type} {payload.trigger.id}, "
            f"{len(payload.steps)} step(s), {len(definition['actions'])} action(s))"
        )

        # 6. Call Klaviyo
        result = await self.sender.send(payload.flow_name, definition)

        if not result.reached:
            return FlowOutcome.error(
                OutcomeKind.GATEWAY_ERROR, 502, ERROR_PROVIDER_UNREACHABLE, result.error
            )

        if not result.ok:
            return FlowOutcome.error(
                OutcomeKind.PROVIDER_ERROR, result.status_code, ERROR_PROVIDER_REJECTED, result.body
            )

        return FlowOutcome(kind=OutcomeKind.SUCCESS, status_code=200, body={"data": result.body})
