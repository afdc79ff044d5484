from typing import TYPE_CHECKING, Optional
from uuid import UUID

from autopilot.automations.application.automation_rule_models import (
    AutomationRuleCreate,
    AutomationRuleUpdate,
)
from autopilot.automations.domain.condition_evaluator import unknown_operators
from autopilot.automations.domain.entities.automation_rule import AutomationRule
from autopilot.automations.domain.rule_status import RuleStatus
from autopilot.main.exceptions import BadRequestException
from autopilot.main.logging import get_logger

if TYPE_CHECKING:
    from autopilot.automations.domain.repositories.automation_rule_repo import (
        AutomationRuleRepository,
    )

logger = get_logger(__name__)


class AutomationRuleService:
    """CRUD for a business's automation rules.

    Every operation is scoped by ``business_id``; a rule belonging to another
    business is reported as not found.
    """

    def __init__(self, rule_repo: "AutomationRuleRepository"):
        self.repo = rule_repo

    def _warn_unknown_operators(self, rule: AutomationRule) -> None:
        operators = unknown_operators(rule.conditions)
        if operators:
            logger.warning(
                f"Automation rule '{rule.name}' uses unknown operators {operators}; "
                "those predicates will never match",
                extra={"rule_id": str(rule.id), "business_id": str(rule.business_id)},
            )

    async def create_rule(
        self, business_id: UUID, created_by: UUID, data: AutomationRuleCreate
    ) -> AutomationRule:
        rule = AutomationRule(
            business_id=business_id,
            created_by=created_by,
            name=data.name,
            description=data.description,
            trigger_type=data.trigger_type,
            trigger_config=data.trigger_config,
            conditions=data.conditions,
            actions=data.actions,
            status=data.status,
            priority=data.priority,
            campaign_id=data.campaign_id,
        )
        self._warn_unknown_operators(rule)

        rule = await self.repo.add(rule)
        logger.info(
            f"Created automation rule '{rule.name}'",
            extra={"rule_id": str(rule.id), "business_id": str(business_id)},
        )
        return rule

    async def get_rules(
        self, business_id: UUID, status: Optional[RuleStatus] = None
    ) -> list[AutomationRule]:
        """Rules for a business, highest priority first, oldest first on ties."""
        return await self.repo.query(business_id, status)

    async def get_rule(self, rule_id: UUID, business_id: UUID) -> AutomationRule:
        return await self.repo.one(rule_id, business_id)

    async def update_rule(
        self, rule_id: UUID, business_id: UUID, data: AutomationRuleUpdate
    ) -> AutomationRule:
        rule = await self.repo.one(rule_id, business_id)

        for field_name, value in data.model_dump(exclude_unset=True).items():
            if value is None and field_name not in ("description", "campaign_id"):
                continue
            # Use the parsed objects, not their dumped dicts
            setattr(rule, field_name, getattr(data, field_name))

        self._warn_unknown_operators(rule)
        return await self.repo.update(rule)

    async def delete_rule(self, rule_id: UUID, business_id: UUID) -> None:
        """Delete a rule and its execution history."""
        await self.repo.delete(rule_id, business_id)
        logger.info(
            "Deleted automation rule",
            extra={"rule_id": str(rule_id), "business_id": str(business_id)},
        )

    async def update_rule_status(
        self, rule_id: UUID, business_id: UUID, status: RuleStatus
    ) -> AutomationRule:
        try:
            status = RuleStatus(status)
        except ValueError:
            raise BadRequestException(f"Invalid rule status: {status}")

        rule = await self.repo.update_status(rule_id, business_id, status)
        logger.info(
            f"Automation rule status changed to {rule.status.value}",
            extra={"rule_id": str(rule_id), "business_id": str(business_id)},
        )
        return rule
