from typing import Any, Dict, List, Optional

from autopilot.automations.domain.entities.automation_execution import (
    AutomationExecution,
    ExecutionSummary,
)
from autopilot.automations.domain.execution_status import ExecutionStatus
from autopilot.database.tables.automation_table import (
    AutomationExecutions as AutomationExecutionsTable,
)


class AutomationExecutionMapper:
    """Mapper between AutomationExecutions table and execution domain objects."""

    @staticmethod
    def to_entity(table: AutomationExecutionsTable) -> AutomationExecution:
        return AutomationExecution(
            id=table.id,
            rule_id=table.rule_id,
            business_id=table.business_id,
            status=ExecutionStatus(table.status),
            triggered_at=table.triggered_at,
            completed_at=table.completed_at,
            trigger_data=table.trigger_data or {},
            execution_result=table.execution_result or {},
            error_message=table.error_message,
            execution_duration_ms=table.execution_duration_ms,
            created_at=table.created_at,
        )

    @staticmethod
    def to_entities(tables: List[AutomationExecutionsTable]) -> List[AutomationExecution]:
        return [AutomationExecutionMapper.to_entity(table) for table in tables]

    @staticmethod
    def to_summary(
        table: AutomationExecutionsTable, rule_name: Optional[str]
    ) -> ExecutionSummary:
        return ExecutionSummary(
            id=table.id,
            rule_id=table.rule_id,
            rule_name=rule_name,
            status=ExecutionStatus(table.status),
            started_at=table.triggered_at,
            completed_at=table.completed_at,
            error=table.error_message,
            execution_time_ms=table.execution_duration_ms or 0,
        )

    @staticmethod
    def to_db_dict(entity: AutomationExecution) -> Dict[str, Any]:
        return {
            "id": entity.id,
            "rule_id": entity.rule_id,
            "business_id": entity.business_id,
            "status": entity.status.value,
            "triggered_at": entity.triggered_at,
            "completed_at": entity.completed_at,
            "trigger_data": entity.trigger_data,
            "execution_result": entity.execution_result,
            "error_message": entity.error_message,
            "execution_duration_ms": entity.execution_duration_ms,
        }
