from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from autopilot.automations.domain.action_spec import ActionSpec, parse_actions
from autopilot.automations.domain.condition_tree import ConditionTree
from autopilot.automations.domain.rule_status import RuleStatus
from autopilot.automations.domain.trigger_type import TriggerType
from autopilot.base.base_entity import Entity


class AutomationRule(Entity):
    """A business-defined rule: trigger tag, condition tree and ordered actions.

    The counters are owned by the execution ledger and are never changed
    through this object.
    """

    def __init__(
        self,
        business_id: UUID,
        name: str,
        trigger_type: TriggerType,
        created_by: UUID,
        actions: list[ActionSpec] | list[dict[str, Any]] | dict[str, Any],
        trigger_config: Optional[dict[str, Any]] = None,
        conditions: ConditionTree | dict[str, Any] | None = None,
        description: Optional[str] = None,
        status: RuleStatus = RuleStatus.ACTIVE,
        priority: int = 0,
        campaign_id: Optional[UUID] = None,
        execution_count: int = 0,
        success_count: int = 0,
        failure_count: int = 0,
        last_executed_at: Optional[datetime] = None,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        super().__init__(id=id, created_at=created_at, updated_at=updated_at)
        self.business_id = business_id
        self.name = name
        self.description = description
        self.trigger_type = TriggerType(trigger_type)
        self.trigger_config = trigger_config or {}
        self.conditions = (
            conditions
            if isinstance(conditions, ConditionTree)
            else ConditionTree.model_validate(conditions or {})
        )
        self.actions = parse_actions(actions)
        self.status = RuleStatus(status)
        self.priority = priority
        self.campaign_id = campaign_id
        self.created_by = created_by
        self.execution_count = execution_count
        self.success_count = success_count
        self.failure_count = failure_count
        self.last_executed_at = last_executed_at

    @property
    def is_active(self) -> bool:
        return self.status == RuleStatus.ACTIVE

    @property
    def success_rate(self) -> float:
        """Percentage of non-skipped runs that succeeded."""
        if not self.execution_count:
            return 0.0
        return round(self.success_count / self.execution_count * 100, 2)
