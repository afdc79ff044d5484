from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from autopilot.automations.domain.execution_status import ExecutionStatus
from autopilot.automations.domain.rule_status import RuleStatus

if TYPE_CHECKING:
    from autopilot.automations.domain.entities.automation_rule import AutomationRule


class AutomationRuleRepository(ABC):
    """Repository interface for automation rules (tenant scoped)."""

    @abstractmethod
    async def add(self, obj: "AutomationRule") -> "AutomationRule":
        """Add a new rule."""
        ...

    @abstractmethod
    async def one(self, id: UUID, business_id: UUID) -> "AutomationRule":
        """Get one rule. Raises NotFoundException if missing."""
        ...

    @abstractmethod
    async def one_or_none(
        self, id: UUID, business_id: Optional[UUID] = None
    ) -> "AutomationRule | None":
        """Get one rule or None. Without business_id the lookup is unscoped."""
        ...

    @abstractmethod
    async def query(
        self, business_id: UUID, status: Optional[RuleStatus] = None
    ) -> list["AutomationRule"]:
        """Rules for a business ordered by priority desc, created_at asc."""
        ...

    @abstractmethod
    async def update(self, obj: "AutomationRule") -> "AutomationRule":
        """Persist the editable fields of a rule. Counters are left alone."""
        ...

    @abstractmethod
    async def update_status(
        self, id: UUID, business_id: UUID, status: RuleStatus
    ) -> "AutomationRule":
        """Change the lifecycle status of a rule."""
        ...

    @abstractmethod
    async def delete(self, id: UUID, business_id: UUID) -> None:
        """Delete a rule together with its execution history."""
        ...

    @abstractmethod
    async def increment_counters(
        self, id: UUID, outcome: ExecutionStatus, executed_at: datetime
    ) -> None:
        """Atomically bump the rolling counters for a SUCCESS or FAILED run."""
        ...

    @abstractmethod
    async def count(self, business_id: UUID, status: Optional[RuleStatus] = None) -> int:
        """Number of rules for a business, optionally by status."""
        ...
