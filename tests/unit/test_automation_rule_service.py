"""Unit tests for AutomationRuleService and the rule input models."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from pydantic import ValidationError

from autopilot.automations.application.automation_rule_models import (
    AutomationRuleCreate,
    AutomationRuleUpdate,
)
from autopilot.automations.application.automation_rule_service import AutomationRuleService
from autopilot.automations.domain.condition_tree import Combinator
from autopilot.automations.domain.rule_status import RuleStatus
from autopilot.automations.domain.trigger_type import TriggerType
from autopilot.main.exceptions import BadRequestException, NotFoundException
from tests.unit.automation_test_utils import InMemoryRuleRepo, make_rule


def create_payload(**overrides):
    payload = {
        "name": "  Welcome new followers  ",
        "trigger_type": "EVENT_BASED",
        "conditions": {
            "type": "AND",
            "rules": [{"field": "followers", "operator": "greater_than", "value": 1000}],
        },
        "actions": [{"action_type": "SEND_NOTIFICATION", "config": {"channel": "email"}}],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def repo():
    return InMemoryRuleRepo()


@pytest.fixture
def service(repo):
    return AutomationRuleService(repo)


class TestCreateModel:
    def test_defaults(self):
        data = AutomationRuleCreate.model_validate(create_payload())

        assert data.name == "Welcome new followers"
        assert data.status == RuleStatus.ACTIVE
        assert data.priority == 0
        assert data.conditions.combinator == Combinator.AND

    def test_blank_name_is_rejected(self):
        with pytest.raises(ValidationError):
            AutomationRuleCreate.model_validate(create_payload(name="   "))

    def test_at_least_one_action(self):
        with pytest.raises(ValidationError):
            AutomationRuleCreate.model_validate(create_payload(actions=[]))

    def test_cannot_create_paused(self):
        with pytest.raises(ValidationError):
            AutomationRuleCreate.model_validate(create_payload(status="PAUSED"))

    def test_can_create_draft(self):
        data = AutomationRuleCreate.model_validate(create_payload(status="DRAFT"))

        assert data.status == RuleStatus.DRAFT

    def test_legacy_action_mapping(self):
        data = AutomationRuleCreate.model_validate(
            create_payload(actions={"UPDATE_STATUS": {"status": "handled"}})
        )

        assert data.actions[0].action_type == "UPDATE_STATUS"

    def test_invalid_builtin_config(self):
        with pytest.raises(ValidationError):
            AutomationRuleCreate.model_validate(
                create_payload(actions=[{"action_type": "TRIGGER_WEBHOOK", "config": {}}])
            )

    def test_null_conditions_become_empty(self):
        data = AutomationRuleCreate.model_validate(create_payload(conditions=None))

        assert data.conditions.is_empty


class TestCreateRule:
    async def test_create_rule(self, service, repo):
        business_id = uuid4()
        user_id = uuid4()

        rule = await service.create_rule(
            business_id, user_id, AutomationRuleCreate.model_validate(create_payload())
        )

        assert rule.business_id == business_id
        assert rule.created_by == user_id
        assert rule.trigger_type == TriggerType.EVENT_BASED
        assert rule.execution_count == 0
        assert repo.rules[rule.id] is rule

    async def test_unknown_operator_is_stored(self, service):
        payload = create_payload(
            conditions={"rules": [{"field": "x", "operator": "regex", "value": "a"}]}
        )

        rule = await service.create_rule(
            uuid4(), uuid4(), AutomationRuleCreate.model_validate(payload)
        )

        assert rule.conditions.predicates[0].operator == "regex"


class TestQueries:
    async def test_get_rules_ordering(self, service, repo):
        business_id = uuid4()
        now = datetime.now(timezone.utc)
        low = make_rule(business_id, priority=1, created_at=now, name="low")
        high_new = make_rule(business_id, priority=5, created_at=now, name="high_new")
        high_old = make_rule(
            business_id, priority=5, created_at=now - timedelta(days=1), name="high_old"
        )
        for rule in (low, high_new, high_old):
            await repo.add(rule)

        rules = await service.get_rules(business_id)

        assert [r.name for r in rules] == ["high_old", "high_new", "low"]

    async def test_get_rules_by_status(self, service, repo):
        business_id = uuid4()
        await repo.add(make_rule(business_id, status=RuleStatus.PAUSED))
        active = make_rule(business_id)
        await repo.add(active)

        assert await service.get_rules(business_id, RuleStatus.ACTIVE) == [active]

    async def test_get_rule_of_other_business(self, service, repo):
        rule = make_rule()
        await repo.add(rule)

        with pytest.raises(NotFoundException):
            await service.get_rule(rule.id, uuid4())


class TestUpdates:
    async def test_update_only_sets_given_fields(self, service, repo):
        rule = make_rule(actions=[{"action_type": "NOTIFY"}], name="before")
        rule.description = "keep me"
        await repo.add(rule)

        updated = await service.update_rule(
            rule.id,
            rule.business_id,
            AutomationRuleUpdate(name=" after ", priority=3),
        )

        assert updated.name == "after"
        assert updated.priority == 3
        assert updated.description == "keep me"
        assert [a.action_type for a in updated.actions] == ["NOTIFY"]

    async def test_update_can_clear_description(self, service, repo):
        rule = make_rule(actions=[{"action_type": "NOTIFY"}])
        rule.description = "old"
        await repo.add(rule)

        updated = await service.update_rule(
            rule.id, rule.business_id, AutomationRuleUpdate(description=None)
        )

        assert updated.description is None

    async def test_update_replaces_actions(self, service, repo):
        rule = make_rule(actions=[{"action_type": "NOTIFY"}])
        await repo.add(rule)

        updated = await service.update_rule(
            rule.id,
            rule.business_id,
            AutomationRuleUpdate.model_validate({"actions": {"UPDATE_STATUS": {"status": "x"}}}),
        )

        assert [a.action_type for a in updated.actions] == ["UPDATE_STATUS"]

    async def test_update_missing_rule(self, service):
        with pytest.raises(NotFoundException):
            await service.update_rule(uuid4(), uuid4(), AutomationRuleUpdate(name="x"))

    async def test_update_status(self, service, repo):
        rule = make_rule()
        await repo.add(rule)

        updated = await service.update_rule_status(rule.id, rule.business_id, RuleStatus.PAUSED)

        assert updated.status == RuleStatus.PAUSED
        assert not updated.is_active

    async def test_update_status_rejects_unknown_value(self, service, repo):
        rule = make_rule()
        await repo.add(rule)

        with pytest.raises(BadRequestException):
            await service.update_rule_status(rule.id, rule.business_id, "RUNNING")

        assert rule.status == RuleStatus.ACTIVE

    async def test_delete(self, service, repo):
        rule = make_rule()
        await repo.add(rule)

        await service.delete_rule(rule.id, rule.business_id)

        assert rule.id not in repo.rules

    async def test_delete_other_business(self, service, repo):
        rule = make_rule()
        await repo.add(rule)

        with pytest.raises(NotFoundException):
            await service.delete_rule(rule.id, uuid4())
