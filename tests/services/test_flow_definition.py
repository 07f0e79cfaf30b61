import pytest

from flow_builder.modules.flows.schemas.flow_schemas import FlowRequest
from flow_builder.modules.flows.services.definition_builder import build_flow_definition
from flow_builder.modules.flows.services.normalizer import normalize_payload
from flow_builder.shared.utils.exceptions import FlowDefinitionError


def _step(**fields):
    step = {"subjectLine": "Hi", "fromEmail": "a@b.com", "fromName": "Team"}
    step.update(fields)
    return step


def _flow(*steps, trigger_type="list"):
    return normalize_payload({
        "flowName": "Welcome",
        "trigger": {"type": trigger_type, "id": "ABC"},
        "steps": list(steps),
    })


def test_single_step_has_one_trigger_and_one_action(welcome_payload):
    definition = build_flow_definition(normalize_payload(welcome_payload))

    assert definition["triggers"] == [{"type": "list", "id": "ABC"}]
    assert definition["profile_filter"] is None
    assert definition["entry_action_id"] == "action_1"

    (action,) = definition["actions"]
    assert action["type"] == "send-email"
    assert action["temporary_id"] == "action_1"
    assert action["links"] == {"next": None}
    assert not any(a["type"] == "time-delay" for a in definition["actions"])


def test_email_message_fields(full_step):
    definition = build_flow_definition(_flow(full_step))

    delay, email = definition["actions"]
    message = email["data"]["message"]
    assert email["data"]["status"] == "live"
    assert message == {
        "from_email": "team@example.com",
        "from_label": "The Team",
        "reply_to_email": "team@example.com",
        "cc_email": None,
        "bcc_email": "audit@example.com",
        "subject_line": "Welcome aboard",
        "preview_text": "Glad you're here",
        "template_id": "YkBQTW",
        "smart_sending_enabled": True,
        "add_tracking_params": True,
        "custom_tracking_params": [{"name": "utm_source", "value": "klaviyo"}],
        "name": "Welcome email",
    }


def test_unnamed_steps_are_numbered():
    definition = build_flow_definition(_flow(_step(), _step()))

    names = [a["data"]["message"]["name"] for a in definition["actions"]]
    assert names == ["Email #1", "Email #2"]


def test_delay_precedes_its_email_and_actions_are_chained():
    definition = build_flow_definition(_flow(
        _step(),
        _step(delay={"value": 2, "unit": "days"}),
        _step(delay={"value": 30, "unit": "minutes"}),
    ))

    actions = definition["actions"]
    assert [a["type"] for a in actions] == [
        "send-email", "time-delay", "send-email", "time-delay", "send-email"
    ]
    assert [a["temporary_id"] for a in actions] == [f"action_{i}" for i in range(1, 6)]
    assert [a["links"]["next"] for a in actions] == [
        "action_2", "action_3", "action_4", "action_5", None
    ]


def test_day_and_sub_day_delay_data():
    definition = build_flow_definition(_flow(
        _step(delay={"value": 1, "unit": "days"}),
        _step(delay={"value": 3, "unit": "hours", "timezone": "UTC"}),
    ))

    day_delay = definition["actions"][0]["data"]
    hour_delay = definition["actions"][2]["data"]

    assert day_delay["unit"] == "days"
    assert day_delay["value"] == 1
    assert day_delay["timezone"] == "profile"
    assert len(day_delay["delay_until_weekdays"]) == 7

    assert hour_delay == {"unit": "hours", "value": 3, "timezone": "UTC", "secondary_value": 0}


def test_delay_on_first_step_becomes_entry_action():
    definition = build_flow_definition(_flow(_step(delay={"value": 5, "unit": "hours"})))

    assert definition["actions"][0]["type"] == "time-delay"
    assert definition["entry_action_id"] == "action_1"


def test_segment_trigger():
    definition = build_flow_definition(_flow(_step(), trigger_type="segment"))

    assert definition["triggers"] == [{"type": "segment", "id": "ABC"}]


def test_no_tracking_params():
    message = build_flow_definition(_flow(_step()))["actions"][0]["data"]["message"]

    assert message["add_tracking_params"] is False
    assert message["custom_tracking_params"] == []


def test_duplicate_tracking_param_fails():
    rows = [{"param": "utm_source", "value": "a"}, {"param": "utm_source", "value": "b"}]

    with pytest.raises(FlowDefinitionError) as exc_info:
        build_flow_definition(_flow(_step(), _step(customTracking=rows)))

    assert str(exc_info.value) == "Step 2 has duplicate tracking parameter 'utm_source'."
    assert exc_info.value.step_number == 2


def test_empty_flow_fails():
    with pytest.raises(FlowDefinitionError):
        build_flow_definition(FlowRequest(flow_name="Empty"))


def test_builder_is_deterministic(full_step):
    flow = _flow(full_step, _step())

    assert build_flow_definition(flow) == build_flow_definition(flow)
