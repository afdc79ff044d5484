"""Automation execution audit records."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from autopilot.automations.domain.execution_status import ExecutionStatus


@dataclass(frozen=True)
class AutomationExecution:
    """Immutable record of one rule invocation.

    Records are only created once the run has reached a terminal state, so
    ``completed_at`` is fixed at construction and can never change.
    """

    id: UUID
    rule_id: UUID
    business_id: Optional[UUID]
    status: ExecutionStatus
    triggered_at: datetime
    completed_at: datetime
    trigger_data: dict[str, Any] = field(default_factory=dict)
    execution_result: dict[str, Any] = field(default_factory=dict)
    error_message: Optional[str] = None
    execution_duration_ms: Optional[int] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate invariants."""
        if self.status == ExecutionStatus.FAILED and not self.error_message:
            raise ValueError("error_message required when status is FAILED")

        if self.status != ExecutionStatus.FAILED and self.error_message:
            raise ValueError("error_message is only allowed when status is FAILED")

        if self.completed_at is None:
            raise ValueError("completed_at is required")

        if self.completed_at < self.triggered_at:
            raise ValueError("completed_at cannot be earlier than triggered_at")

    @property
    def action_outcomes(self) -> list[tuple[str, dict[str, Any]]]:
        """Per-action entries of the result map, in configuration order."""
        if self.status == ExecutionStatus.SKIPPED:
            return []

        entries = [
            (key, value)
            for key, value in self.execution_result.items()
            if isinstance(value, dict) and "success" in value
        ]
        return sorted(entries, key=lambda entry: entry[1].get("index", 0))

    @property
    def has_action_failures(self) -> bool:
        """Whether any action reported failure.

        Independent of ``status``: a SUCCESS run may still contain failed
        actions.
        """
        return any(not value["success"] for _, value in self.action_outcomes)

    @property
    def skip_reason(self) -> Optional[str]:
        if self.status != ExecutionStatus.SKIPPED:
            return None
        return self.execution_result.get("reason")


@dataclass(frozen=True)
class ExecutionSummary:
    """History row for dashboards, joined with the owning rule's name."""

    id: UUID
    rule_id: UUID
    rule_name: Optional[str]
    status: ExecutionStatus
    started_at: datetime
    completed_at: Optional[datetime]
    error: Optional[str]
    execution_time_ms: int


@dataclass(frozen=True)
class AutomationStats:
    total_rules: int
    active_rules: int
    total_executions: int
    success_rate: float
    recent_executions: list[ExecutionSummary]
