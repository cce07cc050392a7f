# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from hr_leaves.models.base import TimestampMixin, UUIDBase
from hr_leaves.models.enums import RequestStatus


class LeaveRequest(UUIDBase, TimestampMixin, table=True):
    """An employee's leave request with its approval workflow state."""

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.Index("ix_request_employee_status", "employee_id", "status"),
        sa.Index("ix_request_dates", "date_from", "date_to"),
    )

    employee_id: uuid.UUID = Field(index=True)
    leave_type_id: uuid.UUID = Field(index=True)
    date_from: date
    date_to: date
    duration_days: int
    justification: str | None = None
    attachment_id: uuid.UUID | None = None
    status: str = Field(
        default=RequestStatus.PENDING, max_length=50, index=True, sa_column_kwargs={"server_default": "PENDING"}
    )
    # Append-only; always reassigned, never mutated in place.
    approval_flow: list[dict[str, Any]] = Field(default_factory=list, sa_type=sa.JSON)
