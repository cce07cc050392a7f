# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from hr_leaves.models.base import UUIDBase, utc_timestamp


class AuditLog(UUIDBase, table=True):
    """Before/after snapshot of one change to an entitlement, leave request or adjustment.

    ``entity_type`` is an ``AuditEntityType`` and ``action`` an ``AuditAction``.
    ``actor_id`` is the approver or HR user when one is known; automated changes
    such as accrual leave it empty. Rows are only ever inserted.
    """

    __tablename__ = "audit_log"
    __table_args__ = (sa.Index("ix_audit_entity", "entity_type", "entity_id"),)

    actor_id: uuid.UUID | None = None
    entity_type: str = Field(max_length=50)
    entity_id: uuid.UUID
    action: str = Field(max_length=50)
    before_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    after_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    created_at: datetime = utc_timestamp(index=True)
