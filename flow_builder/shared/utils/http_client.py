"""
HTTP Client Manager with Connection Pooling

Provides the shared, reusable HTTP client used for the outbound Klaviyo call.
The client is created lazily on first use and closed when the application
shuts down (see the lifespan hook in `flow_builder.main`).

Usage:
    from flow_builder.shared.utils.http_client import http_client_manager

    client = http_client_manager.get_client()
    response = await client.post(url, json=data)
"""
import logging
from typing import Optional, Dict, Any

import httpx

logger = logging.getLogger(__name__)


# Default configuration
DEFAULT_TIMEOUT = 30.0
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_MAX_CONNECTIONS = 20
DEFAULT_MAX_KEEPALIVE_CONNECTIONS = 5
DEFAULT_KEEPALIVE_EXPIRY = 30.0  # seconds


class HTTPClientManager:
    """
    Singleton HTTP client manager with connection pooling.

    - Lazy initialization (client created on first use)
    - One pool shared by all submissions
    - Explicit cleanup on shutdown
    """

    _instance: Optional['HTTPClientManager'] = None
    _client: Optional[httpx.AsyncClient] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        # Prevent re-initialization
        if hasattr(self, '_initialized') and self._initialized:
            return

        self._initialized = True
        self._client = None
        self._config = {
            "timeout": DEFAULT_TIMEOUT,
            "connect_timeout": DEFAULT_CONNECT_TIMEOUT,
            "max_connections": DEFAULT_MAX_CONNECTIONS,
            "max_keepalive_connections": DEFAULT_MAX_KEEPALIVE_CONNECTIONS,
            "keepalive_expiry": DEFAULT_KEEPALIVE_EXPIRY,
        }

    def _create_client(self) -> httpx.AsyncClient:
        """Create a new HTTP client with configured settings."""
        timeout = httpx.Timeout(
            timeout=self._config["timeout"],
            connect=self._config["connect_timeout"]
        )

        limits = httpx.Limits(
            max_connections=self._config["max_connections"],
            max_keepalive_connections=self._config["max_keepalive_connections"],
            keepalive_expiry=self._config["keepalive_expiry"]
        )

        return httpx.AsyncClient(timeout=timeout, limits=limits, follow_redirects=True)

    def get_client(self) -> httpx.AsyncClient:
        """Get the shared HTTP client, creating it on first access."""
        if self._client is None:
            self._client = self._create_client()
            logger.info("HTTP client created with connection pooling")

        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release all connections."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("HTTP client closed, connections released")

    def is_active(self) -> bool:
        """Check if the client is currently active."""
        return self._client is not None

    def get_status(self) -> Dict[str, Any]:
        """Get current client status for the health endpoint."""
        return {
            "active": self.is_active(),
            "config": dict(self._config)
        }


# Singleton instance
http_client_manager = HTTPClientManager()


# ============================================
# FastAPI LIFECYCLE HOOKS
# ============================================

async def startup_http_client():
    """Pre-warm the connection pool during application startup."""
    http_client_manager.get_client()
    logger.info("HTTP client pre-warmed during startup")


async def shutdown_http_client():
    """Close pooled connections during application shutdown."""
    await http_client_manager.close()
    logger.info("HTTP client shutdown complete")
