"""
Shared Utility Functions
"""
from flow_builder.shared.utils.exceptions import FlowDefinitionError
from flow_builder.shared.utils.http_client import (
    HTTPClientManager,
    http_client_manager,
    startup_http_client,
    shutdown_http_client,
)

__all__ = [
    "FlowDefinitionError",
    "HTTPClientManager",
    "http_client_manager",
    "startup_http_client",
    "shutdown_http_client",
]
