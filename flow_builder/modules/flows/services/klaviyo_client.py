"""
Klaviyo Client Service
Low-level API wrapper for Klaviyo's Flows API.

API Documentation: https://developers.klaviyo.com/en/reference/create_flow

Handles:
- Authentication via private API key (`Klaviyo-API-Key` scheme)
- JSON:API media type and pinned `revision` header
- Creating a flow from a definition

No retry: one POST per submission. Transport failures (DNS, refused
connection, timeout) are returned as a result, not raised.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx

from flow_builder.shared.core.config import settings
from flow_builder.shared.core.constants import (
    KLAVIYO_AUTH_SCHEME,
    KLAVIYO_FLOW_RESOURCE_TYPE,
    KLAVIYO_MEDIA_TYPE,
)
from flow_builder.shared.utils.http_client import http_client_manager

logger = logging.getLogger("klaviyo_client")


@dataclass
class KlaviyoResponse:
    """
    Outcome of one create-flow call.

    status_code is None when Klaviyo could not be reached; `error` then holds
    the transport error message. `body` is the decoded JSON response, or None
    when Klaviyo sent no JSON.
    """
    status_code: Optional[int]
    body: Any = None
    error: Optional[str] = None

    @property
    def reached(self) -> bool:
        return self.status_code is not None

    @property
    def ok(self) -> bool:
        return self.reached and 200 <= self.status_code < 300


class FlowSender(Protocol):
    """The one outbound operation the request handler depends on."""

    async def send(self, name: str, definition: Dict[str, Any]) -> KlaviyoResponse:
        ...


def build_create_flow_payload(name: str, definition: Dict[str, Any]) -> Dict[str, Any]:
    """JSON:API document for `POST /api/flows/`."""
    return {
        "data": {
            "type": KLAVIYO_FLOW_RESOURCE_TYPE,
            "attributes": {
                "name": name,
                "definition": definition,
            },
        }
    }


class KlaviyoClient:
    """
    Klaviyo Flows API client.

    The HTTP client defaults to the shared pooled client; pass one explicitly
    (e.g. built on `httpx.MockTransport`) to exercise the client offline.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = settings.KLAVIYO_API_URL,
        revision: str = settings.KLAVIYO_REVISION,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.revision = revision
        self._http_client = http_client

    def _get_headers(self) -> Dict[str, str]:
        """Get common headers for Klaviyo API requests."""
        return {
            "Authorization": f"{KLAVIYO_AUTH_SCHEME} {self.api_key}",
            "Content-Type": KLAVIYO_MEDIA_TYPE,
            "Accept": KLAVIYO_MEDIA_TYPE,
            "revision": self.revision,
        }

    async def send(self, name: str, definition: Dict[str, Any]) -> KlaviyoResponse:
        """
        Create a flow in Klaviyo.

        Args:
            name: Flow name shown in Klaviyo
            definition: Output of `build_flow_definition`

        Returns:
            KlaviyoResponse with Klaviyo's status and JSON body, or the
            transport error when the request never got a response
        """
        client = self._http_client or http_client_manager.get_client()
        payload = build_create_flow_payload(name, definition)

        try:
            response = await client.post(
                self.api_url,
                headers=self._get_headers(),
                json=payload,
            )
        except httpx.HTTPError as e:
            message = str(e) or e.__class__.__name__
            logger.error(f"Klaviyo request failed before a response: {message}")
            return KlaviyoResponse(status_code=None, error=message)

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_success:
            logger.info(f"Klaviyo accepted flow '{name}' (HTTP {response.status_code})")
        else:
            logger.warning(f"Klaviyo rejected flow '{name}' (HTTP {response.status_code})")

        return KlaviyoResponse(status_code=response.status_code, body=body)
