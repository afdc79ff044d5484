from typing import Any, Dict, List

from autopilot.automations.domain.entities.automation_rule import AutomationRule
from autopilot.automations.domain.rule_status import RuleStatus
from autopilot.automations.domain.trigger_type import TriggerType
from autopilot.database.tables.automation_table import AutomationRules as AutomationRulesTable


class AutomationRuleMapper:
    """Mapper between AutomationRules table and AutomationRule domain entity."""

    @staticmethod
    def to_entity(table: AutomationRulesTable) -> AutomationRule:
        """Convert database row to domain entity."""
        return AutomationRule(
            id=table.id,
            created_at=table.created_at,
            updated_at=table.updated_at,
            business_id=table.business_id,
            name=table.name,
            description=table.description,
            trigger_type=TriggerType(table.trigger_type),
            trigger_config=table.trigger_config,
            conditions=table.conditions,
            actions=table.actions,
            status=RuleStatus(table.status),
            priority=table.priority,
            campaign_id=table.campaign_id,
            created_by=table.created_by,
            execution_count=table.execution_count,
            success_count=table.success_count,
            failure_count=table.failure_count,
            last_executed_at=table.last_executed_at,
        )

    @staticmethod
    def to_entities(tables: List[AutomationRulesTable]) -> List[AutomationRule]:
        return [AutomationRuleMapper.to_entity(table) for table in tables]

    @staticmethod
    def to_db_dict(entity: AutomationRule) -> Dict[str, Any]:
        """Editable columns only; counters are written by increments."""
        db_dict = {
            "business_id": entity.business_id,
            "name": entity.name,
            "description": entity.description,
            "trigger_type": entity.trigger_type.value,
            "trigger_config": entity.trigger_config,
            "conditions": entity.conditions.model_dump(mode="json"),
            "actions": [action.model_dump(mode="json") for action in entity.actions],
            "status": entity.status.value,
            "priority": entity.priority,
            "campaign_id": entity.campaign_id,
            "created_by": entity.created_by,
        }
        if entity.id is not None:
            db_dict["id"] = entity.id
        if entity.created_at is not None:
            db_dict["created_at"] = entity.created_at
        return db_dict
