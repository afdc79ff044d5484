"""Rule engine: guard, condition and action pipeline for one rule invocation.

States of a run::

    PENDING -> SKIPPED | EVALUATING_CONDITIONS
    EVALUATING_CONDITIONS -> SKIPPED | EXECUTING_ACTIONS
    EXECUTING_ACTIONS -> SUCCESS | FAILED

Any engine-level fault on the way (missing rule, a raising evaluator or
executor, the overall deadline, a failed store write) ends the run as FAILED.
Individual action failures do not: they are reported inside
``execution_result`` and the run is still a SUCCESS.
"""

import asyncio
import json
import reprlib
import time
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional
from uuid import UUID, uuid4

from autopilot.automations.application.action_executor import ActionExecutor
from autopilot.automations.application.action_registry import ActionHandlerRegistry
from autopilot.automations.application.execution_ledger import ExecutionLedger
from autopilot.automations.domain.action_result import to_execution_result
from autopilot.automations.domain.condition_evaluator import evaluate, unknown_operators
from autopilot.automations.domain.entities.automation_execution import AutomationExecution
from autopilot.automations.domain.entities.automation_rule import AutomationRule
from autopilot.automations.domain.execution_status import (
    ExecutionPhase,
    ExecutionStatus,
    SkipReason,
)
from autopilot.automations.domain.repositories.automation_execution_repo import (
    AutomationExecutionRepository,
)
from autopilot.automations.domain.repositories.automation_rule_repo import (
    AutomationRuleRepository,
)
from autopilot.main.config import Settings, get_settings
from autopilot.main.exceptions import ExecutionTimeoutException, RuleNotFoundException
from autopilot.main.logging import get_logger
from autopilot.main.request_context import bound_context, set_request_context

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


SNAPSHOT_REPR_LIMIT = 2000


def _snapshot(trigger_context: Mapping[str, Any]) -> dict[str, Any]:
    """JSON-safe copy of the trigger context for the audit record.

    Contexts that cannot be serialized (cycles, non-string keys) are stored
    as a truncated repr instead.
    """
    try:
        return json.loads(json.dumps(dict(trigger_context or {}), default=str))
    except (TypeError, ValueError):
        try:
            text = reprlib.repr(trigger_context)
        except Exception:
            text = f"<{type(trigger_context).__name__}>"

        logger.warning("Trigger context is not JSON serializable; storing its repr")
        return {"unserializable_context": text[:SNAPSHOT_REPR_LIMIT]}


class AutomationEngine:
    """Executes one rule against one trigger context and records the outcome.

    The engine holds no mutable state of its own; every dependency is passed
    in, so any number of runs may proceed concurrently.
    """

    def __init__(
        self,
        rule_repo: AutomationRuleRepository,
        execution_repo: AutomationExecutionRepository,
        action_registry: ActionHandlerRegistry,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.settings = settings or get_settings()
        self.rule_repo = rule_repo
        self.ledger = ExecutionLedger(rule_repo, execution_repo, settings=self.settings)
        self.action_executor = ActionExecutor(
            action_registry, default_timeout=self.settings.automation_action_timeout_seconds
        )
        self.clock = clock

    def deadline_for(self, rule: AutomationRule) -> float:
        return (
            self.action_executor.budget_seconds(rule.actions)
            + self.settings.automation_engine_grace_seconds
        )

    async def execute_rule(
        self,
        rule_id: UUID,
        trigger_context: Mapping[str, Any],
        business_id: Optional[UUID] = None,
    ) -> AutomationExecution:
        """
        Run a rule against a trigger context.

        Never raises for engine faults; every outcome comes back as an
        execution record.

        Args:
            rule_id: Rule to run
            trigger_context: Event data the conditions and actions see
            business_id: Restrict the rule lookup to this tenant

        Returns:
            The recorded execution (unpersisted only if the store is down)
        """
        triggered_at = self.clock()
        started = time.perf_counter()
        trigger_data = _snapshot(trigger_context)

        with bound_context(
            rule_id=str(rule_id),
            business_id=str(business_id) if business_id else None,
        ):
            phase = ExecutionPhase.PENDING
            rule: Optional[AutomationRule] = None
            execution_result: dict[str, Any] = {}

            try:
                context = dict(trigger_context or {})
                rule = await self.rule_repo.one_or_none(rule_id, business_id)
                if rule is None:
                    raise RuleNotFoundException()

                business_id = rule.business_id
                set_request_context(business_id=str(business_id))

                if not rule.is_active:
                    return await self._record_skipped(
                        rule, trigger_data, triggered_at, started, SkipReason.RULE_NOT_ACTIVE
                    )

                phase = ExecutionPhase.EVALUATING_CONDITIONS
                bad_operators = unknown_operators(rule.conditions)
                if bad_operators:
                    logger.warning(
                        f"Rule has unknown condition operators {bad_operators}; they never match"
                    )

                if not evaluate(rule.conditions, context):
                    return await self._record_skipped(
                        rule, trigger_data, triggered_at, started, SkipReason.CONDITIONS_NOT_MET
                    )

                phase = ExecutionPhase.EXECUTING_ACTIONS
                deadline = self.deadline_for(rule)
                try:
                    outcomes = await asyncio.wait_for(
                        self.action_executor.execute_actions(rule.actions, context),
                        timeout=deadline,
                    )
                except asyncio.TimeoutError as e:
                    raise ExecutionTimeoutException(
                        f"execution timed out after {deadline:g}s"
                    ) from e

                execution_result = to_execution_result(outcomes)
                execution = self._build_execution(
                    rule_id=rule.id,
                    business_id=rule.business_id,
                    status=ExecutionStatus.SUCCESS,
                    trigger_data=trigger_data,
                    triggered_at=triggered_at,
                    started=started,
                    execution_result=execution_result,
                )
                saved = await self.ledger.record_execution(execution)

                failed_actions = [
                    key for key, value in execution_result.items() if not value["success"]
                ]
                logger.info(
                    f"Automation rule executed with {len(outcomes)} actions",
                    extra={
                        "execution_id": str(saved.id),
                        "failed_actions": failed_actions or None,
                        "duration_ms": saved.execution_duration_ms,
                    },
                )
                return saved

            except Exception as e:
                return await self._record_failed(
                    rule_id=rule_id,
                    business_id=business_id,
                    rule=rule,
                    phase=phase,
                    error=e,
                    trigger_data=trigger_data,
                    triggered_at=triggered_at,
                    started=started,
                    execution_result=execution_result,
                )

    def _build_execution(
        self,
        rule_id: UUID,
        business_id: Optional[UUID],
        status: ExecutionStatus,
        trigger_data: dict[str, Any],
        triggered_at: datetime,
        started: float,
        execution_result: Optional[dict[str, Any]] = None,
        error_message: Optional[str] = None,
    ) -> AutomationExecution:
        completed_at = max(self.clock(), triggered_at)
        return AutomationExecution(
            id=uuid4(),
            rule_id=rule_id,
            business_id=business_id,
            status=status,
            triggered_at=triggered_at,
            completed_at=completed_at,
            trigger_data=trigger_data,
            execution_result=execution_result or {},
            error_message=error_message,
            execution_duration_ms=int((time.perf_counter() - started) * 1000),
        )

    async def _record_skipped(
        self,
        rule: AutomationRule,
        trigger_data: dict[str, Any],
        triggered_at: datetime,
        started: float,
        reason: SkipReason,
    ) -> AutomationExecution:
        execution = self._build_execution(
            rule_id=rule.id,
            business_id=rule.business_id,
            status=ExecutionStatus.SKIPPED,
            trigger_data=trigger_data,
            triggered_at=triggered_at,
            started=started,
            execution_result={"reason": reason.value},
        )
        logger.debug(f"Automation rule skipped: {reason.value}")
        return await self.ledger.record_execution(execution)

    async def _record_failed(
        self,
        rule_id: UUID,
        business_id: Optional[UUID],
        rule: Optional[AutomationRule],
        phase: ExecutionPhase,
        error: Exception,
        trigger_data: dict[str, Any],
        triggered_at: datetime,
        started: float,
        execution_result: dict[str, Any],
    ) -> AutomationExecution:
        message = str(error) or error.__class__.__name__
        if isinstance(error, RuleNotFoundException):
            logger.warning("Automation rule not found")
        else:
            logger.error(
                f"Automation rule failed during {phase.value}: {message}",
                exc_info=error,
            )

        execution = self._build_execution(
            rule_id=rule_id,
            business_id=business_id,
            status=ExecutionStatus.FAILED,
            trigger_data=trigger_data,
            triggered_at=triggered_at,
            started=started,
            execution_result=execution_result,
            error_message=message,
        )

        try:
            return await self.ledger.record_execution(execution, update_counters=rule is not None)
        except Exception:
            # Store is unavailable; return the unpersisted record
            logger.exception(
                "Failed to record failed automation execution",
                extra={"execution_id": str(execution.id)},
            )
            return execution
