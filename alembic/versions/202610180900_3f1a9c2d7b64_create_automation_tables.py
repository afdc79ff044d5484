"""create automation rules and executions tables

Revision ID: 3f1a9c2d7b64
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

# revision identifiers, used by Alembic
revision = "3f1a9c2d7b64"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "automation_rules",
        sa.Column(
            "id", UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("business_id", UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("trigger_type", sa.String(32), nullable=False),
        sa.Column("trigger_config", JSONB(), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column("conditions", JSONB(), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column("actions", JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("status", sa.String(16), server_default="ACTIVE", nullable=False),
        sa.Column("priority", sa.Integer(), server_default="0", nullable=False),
        sa.Column("execution_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("success_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("failure_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("last_executed_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("created_by", UUID(as_uuid=True), nullable=False),
        sa.Column("campaign_id", UUID(as_uuid=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_automation_rules_business_id", "automation_rules", ["business_id"])
    op.create_index(
        "idx_automation_rules_business_status", "automation_rules", ["business_id", "status"]
    )
    op.create_index(
        "idx_automation_rules_business_priority",
        "automation_rules",
        ["business_id", "priority", "created_at"],
    )

    # rule_id carries no foreign key; runs against a missing rule are still recorded
    op.create_table(
        "automation_executions",
        sa.Column(
            "id", UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("rule_id", UUID(as_uuid=True), nullable=False),
        sa.Column("business_id", UUID(as_uuid=True), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("triggered_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("completed_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("trigger_data", JSONB(), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column(
            "execution_result", JSONB(), server_default=sa.text("'{}'::jsonb"), nullable=False
        ),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("execution_duration_ms", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_automation_executions_business_triggered",
        "automation_executions",
        ["business_id", "triggered_at"],
    )
    op.create_index(
        "idx_automation_executions_rule_triggered",
        "automation_executions",
        ["rule_id", "triggered_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_automation_executions_rule_triggered", "automation_executions")
    op.drop_index("idx_automation_executions_business_triggered", "automation_executions")
    op.drop_table("automation_executions")

    op.drop_index("idx_automation_rules_business_priority", "automation_rules")
    op.drop_index("idx_automation_rules_business_status", "automation_rules")
    op.drop_index("ix_automation_rules_business_id", "automation_rules")
    op.drop_table("automation_rules")
