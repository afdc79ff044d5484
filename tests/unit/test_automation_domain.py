"""Unit tests for automation domain entities."""

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from autopilot.automations.domain.entities.automation_execution import AutomationExecution
from autopilot.automations.domain.execution_status import ExecutionStatus
from autopilot.automations.domain.rule_status import RuleStatus
from tests.unit.automation_test_utils import make_rule

NOW = datetime(2026, 2, 1, tzinfo=timezone.utc)


def execution(**overrides):
    values = {
        "id": uuid4(),
        "rule_id": uuid4(),
        "business_id": uuid4(),
        "status": ExecutionStatus.SUCCESS,
        "triggered_at": NOW,
        "completed_at": NOW + timedelta(seconds=1),
    }
    values.update(overrides)
    return AutomationExecution(**values)


class TestAutomationExecution:
    def test_failed_requires_error_message(self):
        with pytest.raises(ValueError):
            execution(status=ExecutionStatus.FAILED)

    @pytest.mark.parametrize("status", [ExecutionStatus.SUCCESS, ExecutionStatus.SKIPPED])
    def test_error_message_only_for_failed(self, status):
        with pytest.raises(ValueError):
            execution(status=status, error_message="nope")

    def test_completed_before_triggered(self):
        with pytest.raises(ValueError):
            execution(completed_at=NOW - timedelta(seconds=1))

    def test_completed_at_cannot_change(self):
        record = execution()

        with pytest.raises(FrozenInstanceError):
            record.completed_at = NOW + timedelta(hours=1)

    def test_action_outcomes_in_configuration_order(self):
        record = execution(
            execution_result={
                "WEBHOOK": {"index": 1, "success": False, "error": "boom"},
                "NOTIFY": {"index": 0, "success": True, "detail": {}},
            }
        )

        assert [key for key, _ in record.action_outcomes] == ["NOTIFY", "WEBHOOK"]
        assert record.has_action_failures

    def test_no_action_failures(self):
        record = execution(
            execution_result={"NOTIFY": {"index": 0, "success": True, "detail": {}}}
        )

        assert not record.has_action_failures

    def test_skip_reason(self):
        record = execution(
            status=ExecutionStatus.SKIPPED, execution_result={"reason": "Conditions not met"}
        )

        assert record.skip_reason == "Conditions not met"
        assert record.action_outcomes == []
        assert not record.has_action_failures


class TestAutomationRule:
    def test_only_active_is_active(self):
        assert make_rule(status=RuleStatus.ACTIVE).is_active
        assert not make_rule(status=RuleStatus.PAUSED).is_active
        assert not make_rule(status=RuleStatus.DRAFT).is_active

    def test_success_rate(self):
        rule = make_rule()
        assert rule.success_rate == 0.0

        rule.execution_count = 3
        rule.success_count = 2
        assert rule.success_rate == 66.67

    def test_status_from_string(self):
        assert make_rule(status="PAUSED").status == RuleStatus.PAUSED

    def test_equality_by_id(self):
        rule = make_rule()
        other = make_rule()
        other.id = rule.id

        assert rule == other
        assert len({rule, other}) == 1
