import asyncio
import json
from unittest.mock import MagicMock, AsyncMock

from flow_builder.modules.flows.services.flow_service import FlowRequestHandler, OutcomeKind
from flow_builder.modules.flows.services.klaviyo_client import KlaviyoClient, KlaviyoResponse


def _sender(response):
    sender = MagicMock()
    sender.send = AsyncMock(return_value=response)
    return sender


def _body(payload):
    return json.dumps(payload).encode()


def test_config_error_checked_first():
    """
    With no key the handler must stop before parsing, whatever the body holds.
    """
    sender = _sender(KlaviyoResponse(status_code=201))
    handler = FlowRequestHandler(api_key="", sender=sender)

    outcome = asyncio.run(handler.handle(b"\x00not json"))

    assert outcome.kind == OutcomeKind.CONFIG_ERROR
    assert outcome.status_code == 500
    sender.send.assert_not_awaited()


def test_success_wraps_klaviyo_body(welcome_payload, klaviyo_created_body):
    handler = FlowRequestHandler(api_key="pk", sender=_sender(
        KlaviyoResponse(status_code=201, body=klaviyo_created_body)
    ))

    outcome = asyncio.run(handler.handle(_body(welcome_payload)))

    assert outcome.kind == OutcomeKind.SUCCESS
    assert outcome.status_code == 200
    assert outcome.body == {"data": klaviyo_created_body}


def test_empty_body_is_invalid_json():
    handler = FlowRequestHandler(api_key="pk", sender=_sender(None))

    outcome = asyncio.run(handler.handle(b""))

    assert outcome.kind == OutcomeKind.CLIENT_ERROR
    assert outcome.status_code == 400
    assert outcome.body["error"] == "Invalid JSON payload."


def test_too_deeply_nested_body_is_invalid_json():
    sender = _sender(None)
    handler = FlowRequestHandler(api_key="pk", sender=sender)

    outcome = asyncio.run(handler.handle(b"[" * 100000 + b"]" * 100000))

    assert outcome.kind == OutcomeKind.CLIENT_ERROR
    assert outcome.status_code == 400
    assert outcome.body["error"] == "Invalid JSON payload."
    sender.send.assert_not_awaited()


def test_build_failure_is_client_error(welcome_payload):
    sender = _sender(KlaviyoResponse(status_code=201))
    welcome_payload["steps"][0]["customTracking"] = [
        {"param": "utm_source", "value": "a"},
        {"param": "utm_source", "value": "b"},
    ]
    handler = FlowRequestHandler(api_key="pk", sender=sender)

    outcome = asyncio.run(handler.handle(_body(welcome_payload)))

    assert outcome.status_code == 400
    assert outcome.body == {"error": "Step 1 has duplicate tracking parameter 'utm_source'."}
    sender.send.assert_not_awaited()


def test_provider_error_without_json_omits_details(welcome_payload):
    handler = FlowRequestHandler(api_key="pk", sender=_sender(KlaviyoResponse(status_code=503)))

    outcome = asyncio.run(handler.handle(_body(welcome_payload)))

    assert outcome.kind == OutcomeKind.PROVIDER_ERROR
    assert outcome.status_code == 503
    assert outcome.body == {"error": "Klaviyo API request failed."}


def test_gateway_error(welcome_payload):
    handler = FlowRequestHandler(api_key="pk", sender=_sender(
        KlaviyoResponse(status_code=None, error="ConnectError")
    ))

    outcome = asyncio.run(handler.handle(_body(welcome_payload)))

    assert outcome.kind == OutcomeKind.GATEWAY_ERROR
    assert outcome.status_code == 502
    assert outcome.body["details"] == "ConnectError"


def test_sender_receives_normalized_name(welcome_payload):
    sender = _sender(KlaviyoResponse(status_code=201, body={}))
    welcome_payload["flowName"] = "  Welcome  "
    handler = FlowRequestHandler(api_key="pk", sender=sender)

    asyncio.run(handler.handle(_body(welcome_payload)))

    name, definition = sender.send.await_args.args
    assert name == "Welcome"
    assert definition["entry_action_id"] == "action_1"


def test_default_sender_uses_handler_key():
    handler = FlowRequestHandler(api_key="pk_live")

    assert isinstance(handler.sender, KlaviyoClient)
    assert handler.sender.api_key == "pk_live"
    assert handler.sender is handler.sender
