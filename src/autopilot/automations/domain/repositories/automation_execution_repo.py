from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from autopilot.automations.domain.execution_status import ExecutionStatus

if TYPE_CHECKING:
    from autopilot.automations.domain.entities.automation_execution import (
        AutomationExecution,
        ExecutionSummary,
    )


class AutomationExecutionRepository(ABC):
    """Append-only store of automation execution records."""

    @abstractmethod
    async def add(self, obj: "AutomationExecution") -> "AutomationExecution":
        """Insert a new execution record. Records are never updated."""
        ...

    @abstractmethod
    async def one_or_none(
        self, id: UUID, business_id: Optional[UUID] = None
    ) -> "AutomationExecution | None":
        """Get one execution or None."""
        ...

    @abstractmethod
    async def get_history(self, business_id: UUID, limit: int) -> list["ExecutionSummary"]:
        """
        Get the newest executions for a business.

        Args:
            business_id: Tenant ID
            limit: Maximum number of rows

        Returns:
            Summaries ordered by triggered_at descending, joined with rule name
        """
        ...

    @abstractmethod
    async def get_for_rule(
        self, rule_id: UUID, business_id: UUID, limit: int
    ) -> list["AutomationExecution"]:
        """Newest executions of a single rule."""
        ...

    @abstractmethod
    async def count(
        self, business_id: UUID, status: Optional[ExecutionStatus] = None
    ) -> int:
        """Number of executions for a business, optionally by status."""
        ...

    @abstractmethod
    async def count_by_status(self, business_id: UUID) -> dict[ExecutionStatus, int]:
        """Execution counts per status for a business. Missing statuses are 0."""
        ...
