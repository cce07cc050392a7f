# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from hr_leaves.models.base import UUIDBase, utc_timestamp


class LeaveLedgerEntry(UUIDBase, table=True):
    """Append-only record of every movement applied to an entitlement."""

    __tablename__ = "leave_ledger_entry"
    __table_args__ = (
        sa.Index("ix_ledger_employee_type", "employee_id", "leave_type_id"),
        sa.Index("ix_ledger_source", "source_type", "source_id"),
        # One accrual per entitlement and period.
        sa.Index(
            "uq_ledger_accrual_period",
            "entitlement_id",
            "source_id",
            unique=True,
            postgresql_where=sa.text("entry_type = 'ACCRUAL'"),
            sqlite_where=sa.text("entry_type = 'ACCRUAL'"),
        ),
    )

    entitlement_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("leave_entitlement.id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    entry_type: str = Field(max_length=50)
    amount_days: float
    source_type: str = Field(max_length=50)
    source_id: str = Field(max_length=255)
    created_at: datetime = utc_timestamp()
