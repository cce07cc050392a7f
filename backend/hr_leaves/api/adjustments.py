# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from hr_leaves.db import SessionDep
from hr_leaves.schemas.adjustment import (
    AdjustmentListResponse,
    AdjustmentResponse,
    ApproveAdjustmentPayload,
    CreateAdjustmentPayload,
)
from hr_leaves.services import adjustment as adjustment_service

adjustments_router = APIRouter(prefix="/leave-adjustment", tags=["adjustments"])


@adjustments_router.post("", response_model=AdjustmentResponse, status_code=status.HTTP_201_CREATED)
async def create_adjustment(
    payload: CreateAdjustmentPayload,
    session: SessionDep,
) -> AdjustmentResponse:
    """Record a manual balance adjustment awaiting approval."""
    return await adjustment_service.create_adjustment(session, payload)


@adjustments_router.get("", response_model=AdjustmentListResponse)
async def list_adjustments(
    session: SessionDep,
    employee_id: uuid.UUID | None = Query(default=None),
) -> AdjustmentListResponse:
    """List adjustments, optionally for one employee."""
    return await adjustment_service.list_adjustments(session, employee_id)


@adjustments_router.get("/{adjustment_id}", response_model=AdjustmentResponse)
async def get_adjustment(
    adjustment_id: uuid.UUID,
    session: SessionDep,
) -> AdjustmentResponse:
    """Get a single adjustment."""
    return await adjustment_service.get_adjustment(session, adjustment_id)


@adjustments_router.put("/{adjustment_id}/approve", response_model=AdjustmentResponse)
async def approve_adjustment(
    adjustment_id: uuid.UUID,
    payload: ApproveAdjustmentPayload,
    session: SessionDep,
) -> AdjustmentResponse:
    """Approve an adjustment and apply it to the balance."""
    return await adjustment_service.approve_adjustment(session, adjustment_id, payload)
