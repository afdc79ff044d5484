import time
from typing import TYPE_CHECKING, Optional, Type
from uuid import UUID

import sqlalchemy as sa

from autopilot.automations.domain.entities.automation_execution import (
    AutomationExecution,
    ExecutionSummary,
)
from autopilot.automations.domain.execution_status import ExecutionStatus
from autopilot.automations.domain.repositories.automation_execution_repo import (
    AutomationExecutionRepository,
)
from autopilot.automations.infrastructure.mappers.automation_execution_mapper import (
    AutomationExecutionMapper,
)
from autopilot.database.errors import translate_db_errors
from autopilot.database.tables.automation_table import (
    AutomationExecutions as AutomationExecutionsTable,
)
from autopilot.database.tables.automation_table import AutomationRules as AutomationRulesTable
from autopilot.main.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class AutomationExecutionRepoImpl(AutomationExecutionRepository):
    """SQLAlchemy implementation of the execution store. Insert and read only."""

    _db_model: Type[AutomationExecutionsTable] = AutomationExecutionsTable

    def __init__(self, session: "AsyncSession", mapper: AutomationExecutionMapper):
        self.session = session
        self.mapper = mapper

    @translate_db_errors
    async def add(self, obj: AutomationExecution) -> AutomationExecution:
        db_dict = self.mapper.to_db_dict(obj)

        query = sa.insert(self._db_model).values(**db_dict).returning(self._db_model)
        record = await self.session.scalar(query)

        return self.mapper.to_entity(record)

    @translate_db_errors
    async def one_or_none(
        self, id: UUID, business_id: Optional[UUID] = None
    ) -> AutomationExecution | None:
        query = sa.select(self._db_model).where(self._db_model.id == id)
        if business_id is not None:
            query = query.where(self._db_model.business_id == business_id)

        record = await self.session.scalar(query)
        if not record:
            return None

        return self.mapper.to_entity(record)

    @translate_db_errors
    async def get_history(self, business_id: UUID, limit: int) -> list[ExecutionSummary]:
        # Outer join: runs against a since-missing rule still show up, without a name
        query = (
            sa.select(self._db_model, AutomationRulesTable.name)
            .outerjoin(AutomationRulesTable, AutomationRulesTable.id == self._db_model.rule_id)
            .where(self._db_model.business_id == business_id)
            .order_by(self._db_model.triggered_at.desc(), self._db_model.id.desc())
            .limit(limit)
        )

        query_start = time.time()
        result = await self.session.execute(query)
        summaries = [
            self.mapper.to_summary(record, rule_name) for record, rule_name in result.all()
        ]
        query_time = (time.time() - query_start) * 1000  # ms

        logger.debug(
            f"get_history: business={business_id}, limit={limit}, "
            f"results={len(summaries)}, query_time={query_time:.2f}ms"
        )

        return summaries

    @translate_db_errors
    async def get_for_rule(
        self, rule_id: UUID, business_id: UUID, limit: int
    ) -> list[AutomationExecution]:
        query = (
            sa.select(self._db_model)
            .where(
                sa.and_(
                    self._db_model.rule_id == rule_id,
                    self._db_model.business_id == business_id,
                )
            )
            .order_by(self._db_model.triggered_at.desc(), self._db_model.id.desc())
            .limit(limit)
        )
        result = await self.session.scalars(query)
        records = result.all()
        if not records:
            return []

        return self.mapper.to_entities(records)

    @translate_db_errors
    async def count(
        self, business_id: UUID, status: Optional[ExecutionStatus] = None
    ) -> int:
        query = (
            sa.select(sa.func.count())
            .select_from(self._db_model)
            .where(self._db_model.business_id == business_id)
        )
        if status is not None:
            query = query.where(self._db_model.status == status.value)

        return await self.session.scalar(query) or 0

    @translate_db_errors
    async def count_by_status(self, business_id: UUID) -> dict[ExecutionStatus, int]:
        query = (
            sa.select(self._db_model.status, sa.func.count())
            .where(self._db_model.business_id == business_id)
            .group_by(self._db_model.status)
        )
        result = await self.session.execute(query)

        counts = {status: 0 for status in ExecutionStatus}
        for status, amount in result.all():
            counts[ExecutionStatus(status)] = amount

        return counts
