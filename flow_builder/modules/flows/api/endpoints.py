"""
Flow Builder API Endpoints
Accepts flow submissions from the form and creates them in Klaviyo.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from flow_builder.shared.core.config import settings
from flow_builder.modules.flows.schemas.flow_schemas import (
    FlowCreatedResponse,
    FlowErrorResponse,
)
from flow_builder.modules.flows.services.flow_service import FlowRequestHandler

router = APIRouter()
logger = logging.getLogger("flows_api")


def get_flow_handler() -> FlowRequestHandler:
    """Handler bound to the configured Klaviyo key (overridden in tests)."""
    return FlowRequestHandler(api_key=settings.KLAVIYO_API_KEY)


@router.post(
    "",
    response_model=FlowCreatedResponse,
    responses={
        400: {"model": FlowErrorResponse, "description": "Invalid JSON, invalid flow, or unbuildable definition"},
        500: {"model": FlowErrorResponse, "description": "KLAVIYO_API_KEY not configured"},
        502: {"model": FlowErrorResponse, "description": "Klaviyo unreachable"},
    },
)
async def create_flow(
    request: Request,
    handler: FlowRequestHandler = Depends(get_flow_handler),
):
    """
    Create a Klaviyo flow from the form payload.

    The raw body is handed to the handler untouched so that malformed JSON and
    missing configuration produce the same error envelope as every other
    failure. Klaviyo rejections are relayed with Klaviyo's own status code.
    """
    raw_body = await request.body()
    outcome = await handler.handle(raw_body)

    if outcome.status_code >= 500:
        logger.error(f"Flow submission ended with {outcome.kind.value} ({outcome.status_code})")

    return JSONResponse(status_code=outcome.status_code, content=outcome.body)
