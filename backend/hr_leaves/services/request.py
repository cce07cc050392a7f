# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlmodel import col

from hr_leaves.exceptions import AppError, InvalidStateError, NotFoundError
from hr_leaves.models.enums import AuditAction, AuditEntityType, Decision, DecisionRole, RequestStatus
from hr_leaves.models.request import LeaveRequest
from hr_leaves.schemas.request import (
    BulkFailure,
    BulkProcessResult,
    DateRange,
    DecisionRecord,
    LeaveRequestListResponse,
    LeaveRequestResponse,
)
from hr_leaves.services import entitlement as ledger
from hr_leaves.services.audit import model_to_audit_dict, write_audit_log
from hr_leaves.services.duration import calculate_duration_days

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hr_leaves.schemas.request import (
        BulkDecisionItem,
        BulkDecisionPayload,
        CreateLeaveRequestPayload,
        UpdateLeaveRequestPayload,
    )

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def build_request_response(request: LeaveRequest) -> LeaveRequestResponse:
    """Map a request model to its response schema."""
    return LeaveRequestResponse(
        id=request.id,
        employee_id=request.employee_id,
        leave_type_id=request.leave_type_id,
        dates=DateRange(from_=request.date_from, to=request.date_to),
        duration_days=request.duration_days,
        status=RequestStatus(request.status),
        justification=request.justification,
        attachment_id=request.attachment_id,
        approval_flow=[DecisionRecord.model_validate(r) for r in request.approval_flow or []],
        created_at=request.created_at,
    )


async def _get_request_or_404(
    session: AsyncSession,
    request_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> LeaveRequest:
    """Fetch a request by ID. Raises 404 if not found."""
    query = select(LeaveRequest).where(col(LeaveRequest.id) == request_id)
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError("Leave request not found")
    return request


def _append_decision(
    request: LeaveRequest,
    role: DecisionRole,
    status: str,
    decided_by: uuid.UUID | None,
    comment: str | None = None,
) -> None:
    record: dict[str, Any] = {
        "role": role.value,
        "status": status,
        "decided_by": str(decided_by) if decided_by is not None else None,
        "decided_at": datetime.now(UTC).isoformat(),
    }
    if comment is not None:
        record["comment"] = comment
    # Reassign so the JSON column is flagged dirty.
    request.approval_flow = [*(request.approval_flow or []), record]


async def _finish(
    session: AsyncSession,
    request: LeaveRequest,
    *,
    actor_id: uuid.UUID | None,
    action: AuditAction,
    before_json: dict[str, Any] | None,
) -> LeaveRequestResponse:
    """Flush, audit and commit a request mutation."""
    await session.flush()

    await write_audit_log(
        session,
        actor_id=actor_id,
        entity_type=AuditEntityType.REQUEST,
        entity_id=request.id,
        action=action,
        before_json=before_json,
        after_json=model_to_audit_dict(request),
    )

    await session.commit()
    await session.refresh(request)
    return build_request_response(request)


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------


async def create_request(
    session: AsyncSession,
    payload: CreateLeaveRequestPayload,
) -> LeaveRequestResponse:
    """Create a PENDING request, reserving its days in the same transaction.

    If the reservation fails nothing is persisted.
    """
    duration_days = calculate_duration_days(payload.start_date, payload.end_date)
    request_id = uuid.uuid4()

    await ledger.reserve_pending(
        session,
        payload.employee_id,
        payload.leave_type_id,
        duration_days,
        source_id=str(request_id),
    )

    leave_request = LeaveRequest(
        id=request_id,
        employee_id=payload.employee_id,
        leave_type_id=payload.leave_type_id,
        date_from=payload.start_date,
        date_to=payload.end_date,
        duration_days=duration_days,
        justification=payload.justification,
        attachment_id=payload.attachment_id,
        status=RequestStatus.PENDING.value,
        approval_flow=[],
    )
    session.add(leave_request)

    logger.info("Leave request %s created for employee %s (%d days)", request_id, payload.employee_id, duration_days)
    return await _finish(
        session,
        leave_request,
        actor_id=payload.employee_id,
        action=AuditAction.CREATE,
        before_json=None,
    )


async def update_request(
    session: AsyncSession,
    request_id: uuid.UUID,
    payload: UpdateLeaveRequestPayload,
) -> LeaveRequestResponse:
    """Change a PENDING request's dates, moving the reservation by the duration delta."""
    leave_request = await _get_request_or_404(session, request_id, for_update=True)

    if leave_request.status != RequestStatus.PENDING.value:
        raise InvalidStateError("Only PENDING requests can be updated")

    new_from = payload.start_date or leave_request.date_from
    new_to = payload.end_date or leave_request.date_to
    new_duration = calculate_duration_days(new_from, new_to)
    delta = new_duration - leave_request.duration_days

    before_dict = model_to_audit_dict(leave_request)

    if delta > 0:
        await ledger.reserve_pending(
            session, leave_request.employee_id, leave_request.leave_type_id, delta, source_id=str(leave_request.id)
        )
    elif delta < 0:
        await ledger.release_pending(
            session, leave_request.employee_id, leave_request.leave_type_id, -delta, source_id=str(leave_request.id)
        )

    leave_request.date_from = new_from
    leave_request.date_to = new_to
    leave_request.duration_days = new_duration
    if payload.justification is not None:
        leave_request.justification = payload.justification
    if payload.attachment_id is not None:
        leave_request.attachment_id = payload.attachment_id

    return await _finish(
        session,
        leave_request,
        actor_id=leave_request.employee_id,
        action=AuditAction.UPDATE,
        before_json=before_dict,
    )


async def manager_approve(
    session: AsyncSession,
    request_id: uuid.UUID,
    approver_id: uuid.UUID,
    comment: str | None = None,
) -> LeaveRequestResponse:
    """Approve a PENDING request: its reserved days become taken."""
    leave_request = await _get_request_or_404(session, request_id, for_update=True)

    if leave_request.status != RequestStatus.PENDING.value:
        raise InvalidStateError("Request is not pending")

    before_dict = model_to_audit_dict(leave_request)

    await ledger.consume_pending_to_taken(
        session,
        leave_request.employee_id,
        leave_request.leave_type_id,
        leave_request.duration_days,
        source_id=str(leave_request.id),
    )

    leave_request.status = RequestStatus.APPROVED.value
    _append_decision(leave_request, DecisionRole.MANAGER, "approved", approver_id, comment)

    logger.info("Leave request %s approved by %s", leave_request.id, approver_id)
    return await _finish(
        session,
        leave_request,
        actor_id=approver_id,
        action=AuditAction.APPROVE,
        before_json=before_dict,
    )


async def manager_reject(
    session: AsyncSession,
    request_id: uuid.UUID,
    approver_id: uuid.UUID,
    reason: str | None = None,
) -> LeaveRequestResponse:
    """Reject a PENDING request: its reserved days are released."""
    leave_request = await _get_request_or_404(session, request_id, for_update=True)

    if leave_request.status != RequestStatus.PENDING.value:
        raise InvalidStateError("Request is not pending")

    before_dict = model_to_audit_dict(leave_request)

    await ledger.release_pending(
        session,
        leave_request.employee_id,
        leave_request.leave_type_id,
        leave_request.duration_days,
        source_id=str(leave_request.id),
    )

    leave_request.status = RequestStatus.REJECTED.value
    _append_decision(leave_request, DecisionRole.MANAGER, "rejected", approver_id, reason or "rejected")

    logger.info("Leave request %s rejected by %s", leave_request.id, approver_id)
    return await _finish(
        session,
        leave_request,
        actor_id=approver_id,
        action=AuditAction.REJECT,
        before_json=before_dict,
    )


async def cancel_request(
    session: AsyncSession,
    request_id: uuid.UUID,
    actor_id: uuid.UUID | None = None,
) -> LeaveRequestResponse:
    """Cancel a PENDING or APPROVED request, undoing its balance effect.

    Rejected and already cancelled requests cannot be cancelled.
    """
    leave_request = await _get_request_or_404(session, request_id, for_update=True)
    before_dict = model_to_audit_dict(leave_request)

    if leave_request.status == RequestStatus.PENDING.value:
        await ledger.release_pending(
            session,
            leave_request.employee_id,
            leave_request.leave_type_id,
            leave_request.duration_days,
            source_id=str(leave_request.id),
        )
    elif leave_request.status == RequestStatus.APPROVED.value:
        await ledger.revert_taken(
            session,
            leave_request.employee_id,
            leave_request.leave_type_id,
            leave_request.duration_days,
            source_id=str(leave_request.id),
        )
    else:
        raise InvalidStateError("Only PENDING or APPROVED requests can be cancelled")

    leave_request.status = RequestStatus.CANCELLED.value
    _append_decision(leave_request, DecisionRole.SYSTEM, "cancelled", actor_id)

    logger.info("Leave request %s cancelled", leave_request.id)
    return await _finish(
        session,
        leave_request,
        actor_id=actor_id,
        action=AuditAction.CANCEL,
        before_json=before_dict,
    )


# ---------------------------------------------------------------------------
# Bulk processing
# ---------------------------------------------------------------------------


async def _decide(
    session: AsyncSession,
    approver_id: uuid.UUID,
    item: BulkDecisionItem,
) -> LeaveRequestResponse:
    if item.decision == Decision.APPROVED:
        return await manager_approve(session, item.id, approver_id)
    return await manager_reject(session, item.id, approver_id, item.reason)


async def bulk_process(
    session: AsyncSession,
    payload: BulkDecisionPayload,
) -> list[LeaveRequestResponse]:
    """Apply decisions in input order, stopping at the first failure.

    Each decision commits on its own, so items before the failing one stay applied
    and items after it are never looked at.
    """
    results: list[LeaveRequestResponse] = []
    for item in payload.requests:
        results.append(await _decide(session, payload.approver_id, item))
    return results


async def bulk_process_partial(
    session: AsyncSession,
    payload: BulkDecisionPayload,
) -> BulkProcessResult:
    """Apply decisions in input order, collecting failures instead of stopping."""
    succeeded: list[LeaveRequestResponse] = []
    failed: list[BulkFailure] = []
    for item in payload.requests:
        try:
            succeeded.append(await _decide(session, payload.approver_id, item))
        except AppError as exc:
            await session.rollback()
            logger.warning("Bulk decision on request %s failed: %s", item.id, exc.message)
            failed.append(
                BulkFailure(
                    id=item.id,
                    error=type(exc).__name__,
                    detail=exc.message,
                    status_code=exc.status_code,
                )
            )
    return BulkProcessResult(succeeded=succeeded, failed=failed)


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_request(
    session: AsyncSession,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Get a single request by ID."""
    leave_request = await _get_request_or_404(session, request_id)
    return build_request_response(leave_request)


async def list_requests(
    session: AsyncSession,
    status_filter: RequestStatus | None = None,
    leave_type_id: uuid.UUID | None = None,
    employee_id: uuid.UUID | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LeaveRequestListResponse:
    """List requests with optional filters, ordered by created_at DESC."""
    base_filters = []

    if status_filter is not None:
        base_filters.append(col(LeaveRequest.status) == status_filter.value)
    if leave_type_id is not None:
        base_filters.append(col(LeaveRequest.leave_type_id) == leave_type_id)
    if employee_id is not None:
        base_filters.append(col(LeaveRequest.employee_id) == employee_id)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRequest)
        .where(*base_filters)
        .order_by(col(LeaveRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    requests = list(result.scalars().all())

    return LeaveRequestListResponse(
        items=[build_request_response(r) for r in requests],
        total=total,
    )


async def filter_history(
    session: AsyncSession,
    employee_id: uuid.UUID | None = None,
    status_filter: RequestStatus | None = None,
    leave_type_id: uuid.UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[LeaveRequestResponse]:
    """Conjunctive history query, newest first.

    ``start_date`` bounds the request's first day from below and ``end_date``
    bounds its last day from above.
    """
    query = select(LeaveRequest)

    if employee_id is not None:
        query = query.where(col(LeaveRequest.employee_id) == employee_id)
    if status_filter is not None:
        query = query.where(col(LeaveRequest.status) == status_filter.value)
    if leave_type_id is not None:
        query = query.where(col(LeaveRequest.leave_type_id) == leave_type_id)
    if start_date is not None:
        query = query.where(col(LeaveRequest.date_from) >= start_date)
    if end_date is not None:
        query = query.where(col(LeaveRequest.date_to) <= end_date)

    result = await session.execute(query.order_by(col(LeaveRequest.created_at).desc()))
    return [build_request_response(r) for r in result.scalars().all()]


async def get_upcoming_approved(
    session: AsyncSession,
    employee_id: uuid.UUID,
    today: date | None = None,
) -> list[LeaveRequestResponse]:
    """APPROVED requests of an employee that have not ended yet, earliest first."""
    today = today or date.today()
    result = await session.execute(
        select(LeaveRequest)
        .where(
            col(LeaveRequest.employee_id) == employee_id,
            col(LeaveRequest.status) == RequestStatus.APPROVED.value,
            col(LeaveRequest.date_to) >= today,
        )
        .order_by(col(LeaveRequest.date_from))
    )
    return [build_request_response(r) for r in result.scalars().all()]
