# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from hr_leaves.models.enums import AdjustmentStatus, AdjustmentType
from hr_leaves.schemas.common import Payload


class CreateAdjustmentPayload(Payload):
    """Request body for creating a manual adjustment.

    ``ADD`` increases taken days (reducing what is left), ``SUBTRACT`` gives days back.
    """

    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    adjustment_type: AdjustmentType
    amount: float = Field(gt=0)
    reason: str = Field(min_length=1, max_length=1000)
    hr_user_id: uuid.UUID


class ApproveAdjustmentPayload(Payload):
    """Request body for approving an adjustment."""

    approver_id: uuid.UUID


class AdjustmentResponse(BaseModel):
    """Response schema for a manual adjustment."""

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    adjustment_type: AdjustmentType
    amount: float
    reason: str
    hr_user_id: uuid.UUID
    approver_id: uuid.UUID | None
    status: AdjustmentStatus
    approved_at: datetime | None
    created_at: datetime


class AdjustmentListResponse(BaseModel):
    """List of adjustments."""

    items: list[AdjustmentResponse]
    total: int
