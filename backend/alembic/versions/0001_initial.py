"""initial leave schema

Revision ID: 0001
Revises:
Create Date: 2025-01-06 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamp(name: str, *, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "leave_entitlement",
        sa.Column("id", sa.Uuid(), nullable=False),
        _timestamp("created_at"),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type_id", sa.Uuid(), nullable=False),
        sa.Column("yearly_entitlement", sa.Float(), server_default="0", nullable=False),
        sa.Column("carry_forward", sa.Float(), server_default="0", nullable=False),
        sa.Column("taken", sa.Float(), server_default="0", nullable=False),
        sa.Column("pending", sa.Float(), server_default="0", nullable=False),
        sa.Column("remaining", sa.Float(), server_default="0", nullable=False),
        _timestamp("updated_at"),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_id", "leave_type_id", name="uq_entitlement_employee_type"),
    )
    op.create_index("ix_leave_entitlement_created_at", "leave_entitlement", ["created_at"])
    op.create_index("ix_leave_entitlement_employee_id", "leave_entitlement", ["employee_id"])
    op.create_index("ix_leave_entitlement_leave_type_id", "leave_entitlement", ["leave_type_id"])

    op.create_table(
        "leave_ledger_entry",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("entitlement_id", sa.Uuid(), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type_id", sa.Uuid(), nullable=False),
        sa.Column("entry_type", sa.String(length=50), nullable=False),
        sa.Column("amount_days", sa.Float(), nullable=False),
        sa.Column("source_type", sa.String(length=50), nullable=False),
        sa.Column("source_id", sa.String(length=255), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["entitlement_id"], ["leave_entitlement.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_leave_ledger_entry_entitlement_id", "leave_ledger_entry", ["entitlement_id"])
    op.create_index("ix_ledger_employee_type", "leave_ledger_entry", ["employee_id", "leave_type_id"])
    op.create_index("ix_ledger_source", "leave_ledger_entry", ["source_type", "source_id"])
    op.create_index(
        "uq_ledger_accrual_period",
        "leave_ledger_entry",
        ["entitlement_id", "source_id"],
        unique=True,
        postgresql_where=sa.text("entry_type = 'ACCRUAL'"),
    )

    op.create_table(
        "leave_request",
        sa.Column("id", sa.Uuid(), nullable=False),
        _timestamp("created_at"),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type_id", sa.Uuid(), nullable=False),
        sa.Column("date_from", sa.Date(), nullable=False),
        sa.Column("date_to", sa.Date(), nullable=False),
        sa.Column("duration_days", sa.Integer(), nullable=False),
        sa.Column("justification", sa.String(), nullable=True),
        sa.Column("attachment_id", sa.Uuid(), nullable=True),
        sa.Column("status", sa.String(length=50), server_default="PENDING", nullable=False),
        sa.Column("approval_flow", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_leave_request_created_at", "leave_request", ["created_at"])
    op.create_index("ix_leave_request_employee_id", "leave_request", ["employee_id"])
    op.create_index("ix_leave_request_leave_type_id", "leave_request", ["leave_type_id"])
    op.create_index("ix_leave_request_status", "leave_request", ["status"])
    op.create_index("ix_request_employee_status", "leave_request", ["employee_id", "status"])
    op.create_index("ix_request_dates", "leave_request", ["date_from", "date_to"])

    op.create_table(
        "leave_adjustment",
        sa.Column("id", sa.Uuid(), nullable=False),
        _timestamp("created_at"),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type_id", sa.Uuid(), nullable=False),
        sa.Column("adjustment_type", sa.String(length=50), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("reason", sa.String(), nullable=False),
        sa.Column("hr_user_id", sa.Uuid(), nullable=False),
        sa.Column("approver_id", sa.Uuid(), nullable=True),
        sa.Column("status", sa.String(length=50), server_default="CREATED", nullable=False),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_leave_adjustment_created_at", "leave_adjustment", ["created_at"])
    op.create_index("ix_leave_adjustment_employee_id", "leave_adjustment", ["employee_id"])
    op.create_index("ix_leave_adjustment_leave_type_id", "leave_adjustment", ["leave_type_id"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("actor_id", sa.Uuid(), nullable=True),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("before_json", sa.JSON(), nullable=True),
        sa.Column("after_json", sa.JSON(), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])
    op.create_index("ix_audit_entity", "audit_log", ["entity_type", "entity_id"])


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("leave_adjustment")
    op.drop_table("leave_request")
    op.drop_table("leave_ledger_entry")
    op.drop_table("leave_entitlement")
