"""Append-only execution log and per-rule statistics."""

from typing import Optional
from uuid import UUID

from autopilot.automations.domain.entities.automation_execution import (
    AutomationExecution,
    AutomationStats,
    ExecutionSummary,
)
from autopilot.automations.domain.execution_status import ExecutionStatus
from autopilot.automations.domain.repositories.automation_execution_repo import (
    AutomationExecutionRepository,
)
from autopilot.automations.domain.repositories.automation_rule_repo import (
    AutomationRuleRepository,
)
from autopilot.automations.domain.rule_status import RuleStatus
from autopilot.main.config import Settings, get_settings
from autopilot.main.logging import get_logger

logger = get_logger(__name__)


class ExecutionLedger:
    """Persists execution records and keeps the rule counters in step."""

    def __init__(
        self,
        rule_repo: AutomationRuleRepository,
        execution_repo: AutomationExecutionRepository,
        settings: Optional[Settings] = None,
    ):
        self.rule_repo = rule_repo
        self.execution_repo = execution_repo
        self.settings = settings or get_settings()

    async def record_execution(
        self, execution: AutomationExecution, update_counters: bool = True
    ) -> AutomationExecution:
        """
        Append an execution record and bump the owning rule's counters.

        SKIPPED runs never touch counters. SUCCESS and FAILED runs both count
        as an execution and increment exactly one of success/failure.

        Args:
            execution: Completed execution record
            update_counters: False when the rule does not exist

        Returns:
            The stored record

        Raises:
            PersistenceException: If the record could not be written
        """
        saved = await self.execution_repo.add(execution)

        if update_counters and execution.status != ExecutionStatus.SKIPPED:
            try:
                await self.rule_repo.increment_counters(
                    execution.rule_id, execution.status, execution.completed_at
                )
            except Exception:
                # The audit row is written; counters are derived and can lag
                logger.exception(
                    "Failed to update automation rule counters",
                    extra={"rule_id": str(execution.rule_id), "execution_id": str(execution.id)},
                )

        return saved

    def _clamp_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.settings.automation_history_default_limit
        return max(1, min(limit, self.settings.automation_history_max_limit))

    async def get_execution_history(
        self, business_id: UUID, limit: Optional[int] = None
    ) -> list[ExecutionSummary]:
        """Newest executions first, capped at limit (default 100)."""
        return await self.execution_repo.get_history(business_id, self._clamp_limit(limit))

    async def get_executions_for_rule(
        self, rule_id: UUID, business_id: UUID, limit: Optional[int] = None
    ) -> list[AutomationExecution]:
        return await self.execution_repo.get_for_rule(
            rule_id, business_id, self._clamp_limit(limit)
        )

    async def get_execution(
        self, execution_id: UUID, business_id: Optional[UUID] = None
    ) -> Optional[AutomationExecution]:
        return await self.execution_repo.one_or_none(execution_id, business_id)

    async def get_automation_stats(self, business_id: UUID) -> AutomationStats:
        total_rules = await self.rule_repo.count(business_id)
        active_rules = await self.rule_repo.count(business_id, RuleStatus.ACTIVE)
        by_status = await self.execution_repo.count_by_status(business_id)
        total_executions = sum(by_status.values())
        successful_executions = by_status.get(ExecutionStatus.SUCCESS, 0)
        recent_executions = await self.execution_repo.get_history(
            business_id, self.settings.automation_recent_executions_limit
        )

        success_rate = (
            round(successful_executions / total_executions * 100, 2) if total_executions else 0.0
        )

        return AutomationStats(
            total_rules=total_rules,
            active_rules=active_rules,
            total_executions=total_executions,
            success_rate=success_rate,
            recent_executions=recent_executions,
        )
