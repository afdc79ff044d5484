"""Unit tests for action specs and action results."""

import pytest
from pydantic import ValidationError

from autopilot.automations.domain.action_result import (
    ActionFailure,
    ActionOutcome,
    ActionSuccess,
    normalize_result,
    to_execution_result,
)
from autopilot.automations.domain.action_spec import (
    ActionSpec,
    ActionType,
    SchedulePostConfig,
    TriggerWebhookConfig,
    parse_actions,
)


class TestActionSpec:
    def test_builtin_config_is_validated(self):
        with pytest.raises(ValidationError):
            ActionSpec(action_type=ActionType.TRIGGER_WEBHOOK.value, config={"url": "not a url"})

    def test_update_status_requires_status(self):
        with pytest.raises(ValidationError):
            ActionSpec(action_type="UPDATE_STATUS", config={})

    def test_unknown_fields_are_kept(self):
        spec = ActionSpec(
            action_type="SEND_NOTIFICATION", config={"channel": "email", "priority": "high"}
        )

        assert spec.config["priority"] == "high"
        assert spec.is_builtin

    def test_custom_type_is_opaque(self):
        spec = ActionSpec(action_type="NOTIFY", config={"anything": [1, 2]})

        assert not spec.is_builtin
        assert spec.typed_config() == {"anything": [1, 2]}

    def test_typed_config_for_builtin(self):
        spec = ActionSpec(
            action_type="SCHEDULE_POST", config={"scheduleTime": "2026-01-01T10:00:00+00:00"}
        )

        typed = spec.typed_config()
        assert isinstance(typed, SchedulePostConfig)
        assert typed.schedule_time.year == 2026

    def test_webhook_config_defaults(self):
        config = TriggerWebhookConfig.model_validate({"url": "https://example.com/hook"})

        assert config.method == "POST"
        assert config.headers == {}

    def test_aliases_for_action_type(self):
        assert ActionSpec.model_validate({"type": "NOTIFY"}).action_type == "NOTIFY"
        assert ActionSpec.model_validate({"actionType": "NOTIFY"}).action_type == "NOTIFY"


class TestParseActions:
    def test_list_keeps_order(self):
        actions = parse_actions(
            [{"action_type": "B"}, {"action_type": "A"}, {"action_type": "B"}]
        )

        assert [a.action_type for a in actions] == ["B", "A", "B"]

    def test_legacy_mapping(self):
        actions = parse_actions(
            {"SEND_NOTIFICATION": {"channel": "email"}, "UPDATE_STATUS": {"status": "done"}}
        )

        assert [a.action_type for a in actions] == ["SEND_NOTIFICATION", "UPDATE_STATUS"]
        assert actions[1].config == {"status": "done"}

    def test_none_is_empty(self):
        assert parse_actions(None) == []


class TestNormalizeResult:
    def test_passthrough(self):
        result = ActionFailure(error="boom")

        assert normalize_result(result) is result

    def test_none_is_success(self):
        assert normalize_result(None) == ActionSuccess()

    def test_legacy_success_dict(self):
        result = normalize_result({"success": True, "message": "Notification sent"})

        assert result == ActionSuccess(detail={"message": "Notification sent"})

    def test_legacy_failure_dict(self):
        result = normalize_result({"success": False, "error": "quota exceeded"})

        assert result == ActionFailure(error="quota exceeded")

    def test_failure_without_error_text(self):
        result = normalize_result({"success": False})

        assert isinstance(result, ActionFailure)
        assert result.error

    def test_scalar_is_wrapped(self):
        assert normalize_result("ok") == ActionSuccess(detail={"result": "ok"})


class TestExecutionResult:
    def test_one_entry_per_action_and_duplicates_kept(self):
        outcomes = [
            ActionOutcome("NOTIFY", 0, ActionSuccess(detail={"sent": 1})),
            ActionOutcome("WEBHOOK", 1, ActionFailure(error="boom")),
            ActionOutcome("NOTIFY", 2, ActionSuccess()),
        ]

        result = to_execution_result(outcomes)

        assert list(result) == ["NOTIFY", "WEBHOOK", "NOTIFY#2"]
        assert result["NOTIFY"] == {"index": 0, "success": True, "detail": {"sent": 1}}
        assert result["WEBHOOK"] == {"index": 1, "success": False, "error": "boom"}
        assert result["NOTIFY#2"]["index"] == 2
