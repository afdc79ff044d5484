"""Database tables for automation rules and their execution history."""

from datetime import datetime
from typing import Optional
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from autopilot.database.tables.base_class import BasePublic, JSONType


class AutomationRules(BasePublic):
    """Business-defined automation rules with rolling execution counters."""

    __tablename__ = "automation_rules"

    # Tenant scope
    business_id: Mapped[UUID] = mapped_column(sa.Uuid, nullable=False, index=True)

    name: Mapped[str] = mapped_column(sa.String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)

    trigger_type: Mapped[str] = mapped_column(sa.String(32), nullable=False)
    trigger_config: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    conditions: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    actions: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)

    status: Mapped[str] = mapped_column(sa.String(16), nullable=False, server_default="ACTIVE")
    priority: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default="0")

    # Counters, only written through atomic increments
    execution_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0, server_default="0")
    success_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0, server_default="0")
    failure_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0, server_default="0")
    last_executed_at: Mapped[Optional[datetime]] = mapped_column(sa.TIMESTAMP(timezone=True))

    created_by: Mapped[UUID] = mapped_column(sa.Uuid, nullable=False)
    campaign_id: Mapped[Optional[UUID]] = mapped_column(sa.Uuid)

    __table_args__ = (
        sa.Index("idx_automation_rules_business_status", "business_id", "status"),
        sa.Index("idx_automation_rules_business_priority", "business_id", "priority", "created_at"),
    )


class AutomationExecutions(BasePublic):
    """Append-only audit trail, one row per rule invocation."""

    __tablename__ = "automation_executions"

    # No foreign key: a run against a missing rule is still recorded.
    # Deleting a rule removes its rows explicitly.
    rule_id: Mapped[UUID] = mapped_column(sa.Uuid, nullable=False)
    business_id: Mapped[Optional[UUID]] = mapped_column(sa.Uuid)

    status: Mapped[str] = mapped_column(sa.String(16), nullable=False)
    triggered_at: Mapped[datetime] = mapped_column(sa.TIMESTAMP(timezone=True), nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(sa.TIMESTAMP(timezone=True))

    trigger_data: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    execution_result: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    error_message: Mapped[Optional[str]] = mapped_column(sa.Text)
    execution_duration_ms: Mapped[Optional[int]] = mapped_column(sa.Integer)

    __table_args__ = (
        sa.Index("idx_automation_executions_business_triggered", "business_id", "triggered_at"),
        sa.Index("idx_automation_executions_rule_triggered", "rule_id", "triggered_at"),
    )
