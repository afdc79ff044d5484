from datetime import datetime
from typing import TYPE_CHECKING, Optional, Type
from uuid import UUID

import sqlalchemy as sa

from autopilot.automations.domain.entities.automation_rule import AutomationRule
from autopilot.automations.domain.execution_status import ExecutionStatus
from autopilot.automations.domain.repositories.automation_rule_repo import (
    AutomationRuleRepository,
)
from autopilot.automations.domain.rule_status import RuleStatus
from autopilot.automations.infrastructure.mappers.automation_rule_mapper import (
    AutomationRuleMapper,
)
from autopilot.database.errors import translate_db_errors
from autopilot.database.tables.automation_table import (
    AutomationExecutions as AutomationExecutionsTable,
)
from autopilot.database.tables.automation_table import AutomationRules as AutomationRulesTable
from autopilot.main.exceptions import NotFoundException
from autopilot.main.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class AutomationRuleRepoImpl(AutomationRuleRepository):
    _db_model: Type[AutomationRulesTable] = AutomationRulesTable

    def __init__(self, session: "AsyncSession", mapper: AutomationRuleMapper):
        self.session = session
        self.mapper = mapper

    @translate_db_errors
    async def add(self, obj: AutomationRule) -> AutomationRule:
        db_dict = self.mapper.to_db_dict(obj)

        query = sa.insert(self._db_model).values(**db_dict).returning(self._db_model)
        record = await self.session.scalar(query)

        return self.mapper.to_entity(record)

    async def one(self, id: UUID, business_id: UUID) -> AutomationRule:
        result = await self.one_or_none(id, business_id)
        if not result:
            raise NotFoundException("Automation rule not found")
        return result

    @translate_db_errors
    async def one_or_none(
        self, id: UUID, business_id: Optional[UUID] = None
    ) -> AutomationRule | None:
        query = (
            sa.select(self._db_model)
            .where(self._db_model.id == id)
            .execution_options(populate_existing=True)
        )
        if business_id is not None:
            query = query.where(self._db_model.business_id == business_id)

        record = await self.session.scalar(query)
        if not record:
            return None

        return self.mapper.to_entity(record)

    @translate_db_errors
    async def query(
        self, business_id: UUID, status: Optional[RuleStatus] = None
    ) -> list[AutomationRule]:
        query = (
            sa.select(self._db_model)
            .where(self._db_model.business_id == business_id)
            .execution_options(populate_existing=True)
        )

        if status is not None:
            query = query.where(self._db_model.status == status.value)

        # Ties on priority go to the oldest rule
        query = query.order_by(
            self._db_model.priority.desc(),
            self._db_model.created_at.asc(),
            self._db_model.id.asc(),
        )

        result = await self.session.scalars(query)
        records = result.all()
        if not records:
            return []

        return self.mapper.to_entities(records)

    @translate_db_errors
    async def update(self, obj: AutomationRule) -> AutomationRule:
        db_dict = self.mapper.to_db_dict(obj)
        db_dict.pop("id", None)
        db_dict.pop("created_by", None)
        db_dict.pop("created_at", None)

        query = (
            sa.update(self._db_model)
            .where(
                sa.and_(
                    self._db_model.id == obj.id,
                    self._db_model.business_id == obj.business_id,
                )
            )
            .values(**db_dict)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(query)
        if result.rowcount == 0:
            raise NotFoundException("Automation rule not found")

        return await self.one(obj.id, obj.business_id)

    @translate_db_errors
    async def update_status(
        self, id: UUID, business_id: UUID, status: RuleStatus
    ) -> AutomationRule:
        query = (
            sa.update(self._db_model)
            .where(
                sa.and_(
                    self._db_model.id == id,
                    self._db_model.business_id == business_id,
                )
            )
            .values(status=status.value)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(query)
        if result.rowcount == 0:
            raise NotFoundException("Automation rule not found")

        return await self.one(id, business_id)

    @translate_db_errors
    async def delete(self, id: UUID, business_id: UUID) -> None:
        # Scope check before touching the history rows
        await self.one(id, business_id)

        history_query = sa.delete(AutomationExecutionsTable).where(
            AutomationExecutionsTable.rule_id == id
        )
        history_result = await self.session.execute(history_query)

        query = sa.delete(self._db_model).where(
            sa.and_(
                self._db_model.id == id,
                self._db_model.business_id == business_id,
            )
        )
        await self.session.execute(query)

        logger.debug(
            f"Deleted automation rule {id} and {history_result.rowcount} executions",
            extra={"rule_id": str(id), "business_id": str(business_id)},
        )

    @translate_db_errors
    async def increment_counters(
        self, id: UUID, outcome: ExecutionStatus, executed_at: datetime
    ) -> None:
        """Single UPDATE with column arithmetic, safe under concurrent runs."""
        if outcome == ExecutionStatus.SUCCESS:
            outcome_column = self._db_model.success_count
        elif outcome == ExecutionStatus.FAILED:
            outcome_column = self._db_model.failure_count
        else:
            raise ValueError(f"Counters are not updated for {outcome.value} executions")

        query = (
            sa.update(self._db_model)
            .where(self._db_model.id == id)
            .values(
                {
                    self._db_model.execution_count: self._db_model.execution_count + 1,
                    outcome_column: outcome_column + 1,
                    self._db_model.last_executed_at: executed_at,
                }
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(query)

    @translate_db_errors
    async def count(self, business_id: UUID, status: Optional[RuleStatus] = None) -> int:
        query = (
            sa.select(sa.func.count())
            .select_from(self._db_model)
            .where(self._db_model.business_id == business_id)
        )
        if status is not None:
            query = query.where(self._db_model.status == status.value)

        return await self.session.scalar(query) or 0
