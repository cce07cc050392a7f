# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from hr_leaves.models.base import TimestampMixin, UUIDBase
from hr_leaves.models.enums import AdjustmentStatus


class LeaveAdjustment(UUIDBase, TimestampMixin, table=True):
    """An HR-initiated correction to an entitlement's taken days."""

    __tablename__ = "leave_adjustment"

    employee_id: uuid.UUID = Field(index=True)
    leave_type_id: uuid.UUID = Field(index=True)
    adjustment_type: str = Field(max_length=50)
    amount: float
    reason: str
    hr_user_id: uuid.UUID
    approver_id: uuid.UUID | None = None
    status: str = Field(
        default=AdjustmentStatus.CREATED, max_length=50, sa_column_kwargs={"server_default": "CREATED"}
    )
    approved_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
