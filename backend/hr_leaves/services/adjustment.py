# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from hr_leaves.exceptions import InvalidStateError, NotFoundError
from hr_leaves.models.adjustment import LeaveAdjustment
from hr_leaves.models.enums import AdjustmentStatus, AdjustmentType, AuditAction, AuditEntityType
from hr_leaves.schemas.adjustment import AdjustmentListResponse, AdjustmentResponse
from hr_leaves.services import entitlement as ledger
from hr_leaves.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hr_leaves.schemas.adjustment import ApproveAdjustmentPayload, CreateAdjustmentPayload

logger = logging.getLogger(__name__)


def _build_adjustment_response(adjustment: LeaveAdjustment) -> AdjustmentResponse:
    return AdjustmentResponse(
        id=adjustment.id,
        employee_id=adjustment.employee_id,
        leave_type_id=adjustment.leave_type_id,
        adjustment_type=AdjustmentType(adjustment.adjustment_type),
        amount=adjustment.amount,
        reason=adjustment.reason,
        hr_user_id=adjustment.hr_user_id,
        approver_id=adjustment.approver_id,
        status=AdjustmentStatus(adjustment.status),
        approved_at=adjustment.approved_at,
        created_at=adjustment.created_at,
    )


async def _get_adjustment_or_404(
    session: AsyncSession,
    adjustment_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> LeaveAdjustment:
    query = select(LeaveAdjustment).where(col(LeaveAdjustment.id) == adjustment_id)
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    adjustment = result.scalar_one_or_none()
    if adjustment is None:
        raise NotFoundError("Leave adjustment not found")
    return adjustment


async def create_adjustment(
    session: AsyncSession,
    payload: CreateAdjustmentPayload,
) -> AdjustmentResponse:
    """Record a manual adjustment. The balance is untouched until approval."""
    adjustment = LeaveAdjustment(
        employee_id=payload.employee_id,
        leave_type_id=payload.leave_type_id,
        adjustment_type=payload.adjustment_type.value,
        amount=payload.amount,
        reason=payload.reason,
        hr_user_id=payload.hr_user_id,
        status=AdjustmentStatus.CREATED.value,
    )
    session.add(adjustment)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=payload.hr_user_id,
        entity_type=AuditEntityType.ADJUSTMENT,
        entity_id=adjustment.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(adjustment),
    )

    await session.commit()
    await session.refresh(adjustment)
    return _build_adjustment_response(adjustment)


async def approve_adjustment(
    session: AsyncSession,
    adjustment_id: uuid.UUID,
    payload: ApproveAdjustmentPayload,
) -> AdjustmentResponse:
    """Approve an adjustment and apply it to the entitlement's taken days.

    ``ADD`` raises taken by ``amount`` and ``SUBTRACT`` lowers it. If the ledger
    rejects the change the adjustment stays ``CREATED``.
    """
    adjustment = await _get_adjustment_or_404(session, adjustment_id, for_update=True)

    if adjustment.status == AdjustmentStatus.APPROVED.value:
        raise InvalidStateError("Adjustment is already approved")

    before_dict = model_to_audit_dict(adjustment)

    delta = adjustment.amount
    if adjustment.adjustment_type == AdjustmentType.SUBTRACT.value:
        delta = -delta

    await ledger.adjust_balance(
        session,
        adjustment.employee_id,
        adjustment.leave_type_id,
        delta,
        source_id=str(adjustment.id),
    )

    adjustment.status = AdjustmentStatus.APPROVED.value
    adjustment.approver_id = payload.approver_id
    adjustment.approved_at = datetime.now(UTC)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=payload.approver_id,
        entity_type=AuditEntityType.ADJUSTMENT,
        entity_id=adjustment.id,
        action=AuditAction.APPROVE,
        before_json=before_dict,
        after_json=model_to_audit_dict(adjustment),
    )

    await session.commit()
    await session.refresh(adjustment)

    logger.info("Adjustment %s approved by %s (%+.2f days)", adjustment.id, payload.approver_id, delta)
    return _build_adjustment_response(adjustment)


async def get_adjustment(
    session: AsyncSession,
    adjustment_id: uuid.UUID,
) -> AdjustmentResponse:
    """Get a single adjustment by ID."""
    adjustment = await _get_adjustment_or_404(session, adjustment_id)
    return _build_adjustment_response(adjustment)


async def list_adjustments(
    session: AsyncSession,
    employee_id: uuid.UUID | None = None,
) -> AdjustmentListResponse:
    """List adjustments, newest first."""
    filters = []
    if employee_id is not None:
        filters.append(col(LeaveAdjustment.employee_id) == employee_id)

    count_result = await session.execute(select(func.count()).select_from(LeaveAdjustment).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveAdjustment).where(*filters).order_by(col(LeaveAdjustment.created_at).desc())
    )
    return AdjustmentListResponse(
        items=[_build_adjustment_response(a) for a in result.scalars().all()],
        total=total,
    )
