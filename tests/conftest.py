# tests/conftest.py
"""
Shared fixtures for all test modules.
Klaviyo is never called: the flow handler gets an AsyncMock sender.
"""

import pytest
from unittest.mock import MagicMock, AsyncMock
from fastapi.testclient import TestClient

from flow_builder.main import app
from flow_builder.modules.flows.api.endpoints import get_flow_handler
from flow_builder.modules.flows.services.flow_service import FlowRequestHandler
from flow_builder.modules.flows.services.klaviyo_client import KlaviyoResponse


TEST_API_KEY = "pk_test_123"


# --- SAMPLE PAYLOAD FIXTURES ---
@pytest.fixture
def welcome_payload():
    """Smallest valid submission: one list trigger, one email, no delay."""
    return {
        "flowName": "Welcome",
        "trigger": {"type": "list", "id": "ABC"},
        "steps": [
            {"subjectLine": "Hi", "fromEmail": "a@b.com", "fromName": "Team"}
        ]
    }


@pytest.fixture
def full_step():
    """An email step with every field filled, as the form sends it."""
    return {
        "internalName": "  Welcome email  ",
        "subjectLine": "  Welcome aboard  ",
        "previewText": "Glad you're here",
        "fromEmail": "team@example.com",
        "fromName": "The Team",
        "replyToEmail": "",
        "ccEmail": " ",
        "bccEmail": "audit@example.com",
        "templateId": "YkBQTW",
        "smartSendingEnabled": True,
        "status": "live",
        "delay": {"value": 2, "unit": "hours", "timezone": ""},
        "customTracking": [
            {"param": "utm_source", "value": "klaviyo"},
            {"param": "utm_medium", "value": ""}
        ]
    }


@pytest.fixture
def klaviyo_created_body():
    """Shape of Klaviyo's 201 response to a create-flow call."""
    return {
        "data": {
            "type": "flow",
            "id": "XyZ123",
            "attributes": {"name": "Welcome", "status": "draft"}
        }
    }


# --- MOCK FIXTURES FOR KLAVIYO ---
@pytest.fixture
def mock_sender(klaviyo_created_body):
    """Sender that reports a successful flow creation."""
    sender = MagicMock()
    sender.send = AsyncMock(return_value=KlaviyoResponse(status_code=201, body=klaviyo_created_body))
    return sender


@pytest.fixture
def use_handler():
    """Install a specific FlowRequestHandler for the endpoint; undone after the test."""
    def _install(handler: FlowRequestHandler):
        app.dependency_overrides[get_flow_handler] = lambda: handler
        return handler

    yield _install
    app.dependency_overrides.clear()


# --- TEST CLIENT FIXTURE ---
@pytest.fixture
def test_client(use_handler, mock_sender):
    """FastAPI test client whose handler has a key and a mocked Klaviyo."""
    use_handler(FlowRequestHandler(api_key=TEST_API_KEY, sender=mock_sender))
    return TestClient(app)
