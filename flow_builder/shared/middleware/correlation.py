"""
Request Middleware

Assigns a request ID to each flow submission for log tracing.
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from flow_builder.shared.core.logging import set_correlation_id

REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Middleware that assigns a correlation ID to each request.

    - Reuses an incoming X-Request-ID header when the form (or a proxy) sends one
    - Otherwise generates a new `flow-xxxxxxxx` ID
    - Echoes the ID back in the X-Request-ID response header
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = set_correlation_id(request.headers.get(REQUEST_ID_HEADER))

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = correlation_id

        return response
