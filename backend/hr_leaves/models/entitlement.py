# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from hr_leaves.models.base import TimestampMixin, UUIDBase, utc_timestamp


class LeaveEntitlement(UUIDBase, TimestampMixin, table=True):
    """Per-employee, per-leave-type balance record.

    ``remaining`` is a cached ``yearly_entitlement + carry_forward - taken - pending``
    and is only ever written by the entitlement service.
    """

    __tablename__ = "leave_entitlement"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "leave_type_id", name="uq_entitlement_employee_type"),
    )

    employee_id: uuid.UUID = Field(index=True)
    leave_type_id: uuid.UUID = Field(index=True)
    yearly_entitlement: float = Field(default=0, sa_column_kwargs={"server_default": "0"})
    carry_forward: float = Field(default=0, sa_column_kwargs={"server_default": "0"})
    taken: float = Field(default=0, sa_column_kwargs={"server_default": "0"})
    pending: float = Field(default=0, sa_column_kwargs={"server_default": "0"})
    remaining: float = Field(default=0, sa_column_kwargs={"server_default": "0"})
    updated_at: datetime = utc_timestamp()
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
