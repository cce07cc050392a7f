from __future__ import annotations

import logging
import uuid
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from hr_leaves.config import get_settings
from hr_leaves.exceptions import (
    BadRequestError,
    ConflictError,
    InconsistentStateError,
    InsufficientBalanceError,
    InsufficientPendingError,
    NotFoundError,
)
from hr_leaves.models.entitlement import LeaveEntitlement
from hr_leaves.models.enums import AuditAction, AuditEntityType, LedgerEntryType, LedgerSourceType, RequestStatus
from hr_leaves.models.ledger import LeaveLedgerEntry
from hr_leaves.models.request import LeaveRequest
from hr_leaves.schemas.entitlement import (
    AccrualRunResponse,
    EntitlementResponse,
    LedgerEntryResponse,
    LedgerListResponse,
    RemoveEntitlementsResponse,
)
from hr_leaves.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hr_leaves.schemas.entitlement import (
        AccrualRunPayload,
        CreateEntitlementPayload,
        UpdateEntitlementPayload,
    )

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def build_entitlement_response(entitlement: LeaveEntitlement) -> EntitlementResponse:
    """Map an entitlement model to its response schema."""
    return EntitlementResponse(
        id=entitlement.id,
        employee_id=entitlement.employee_id,
        leave_type_id=entitlement.leave_type_id,
        yearly_entitlement=entitlement.yearly_entitlement,
        carry_forward=entitlement.carry_forward,
        taken=entitlement.taken,
        pending=entitlement.pending,
        remaining=entitlement.remaining,
        version=entitlement.version,
        created_at=entitlement.created_at,
        updated_at=entitlement.updated_at,
    )


def _build_ledger_entry_response(entry: LeaveLedgerEntry) -> LedgerEntryResponse:
    return LedgerEntryResponse(
        id=entry.id,
        entitlement_id=entry.entitlement_id,
        leave_type_id=entry.leave_type_id,
        entry_type=LedgerEntryType(entry.entry_type),
        amount_days=entry.amount_days,
        source_type=LedgerSourceType(entry.source_type),
        source_id=entry.source_id,
        created_at=entry.created_at,
    )


def compute_remaining(yearly_entitlement: float, carry_forward: float, taken: float, pending: float) -> float:
    """The available balance derived from the stored fields."""
    return yearly_entitlement + carry_forward - taken - pending


def _require_positive(days: float) -> None:
    if days <= 0:
        raise BadRequestError("Days must be greater than zero")


async def _get_entitlement_for_update(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
) -> LeaveEntitlement:
    """Fetch the entitlement with a FOR UPDATE lock. Raises 404 if absent.

    The lock is held until the caller's transaction ends, which serializes every
    read-modify-write against the same (employee, leave type) record.
    """
    result = await session.execute(
        select(LeaveEntitlement)
        .where(
            col(LeaveEntitlement.employee_id) == employee_id,
            col(LeaveEntitlement.leave_type_id) == leave_type_id,
        )
        .with_for_update()
    )
    entitlement = result.scalar_one_or_none()
    if entitlement is None:
        raise NotFoundError("Leave entitlement not found")
    return entitlement


async def _apply_movement(
    session: AsyncSession,
    entitlement: LeaveEntitlement,
    *,
    entry_type: LedgerEntryType,
    amount_days: float,
    source_type: LedgerSourceType,
    source_id: str,
    taken: float | None = None,
    pending: float | None = None,
    yearly_entitlement: float | None = None,
    carry_forward: float | None = None,
) -> LeaveEntitlement:
    """Write already-validated field values, recompute remaining and record the movement."""
    if taken is not None:
        entitlement.taken = taken
    if pending is not None:
        entitlement.pending = pending
    if yearly_entitlement is not None:
        entitlement.yearly_entitlement = yearly_entitlement
    if carry_forward is not None:
        entitlement.carry_forward = carry_forward
    entitlement.remaining = compute_remaining(
        entitlement.yearly_entitlement, entitlement.carry_forward, entitlement.taken, entitlement.pending
    )
    entitlement.version += 1
    entitlement.updated_at = datetime.now(UTC)

    session.add(
        LeaveLedgerEntry(
            entitlement_id=entitlement.id,
            employee_id=entitlement.employee_id,
            leave_type_id=entitlement.leave_type_id,
            entry_type=entry_type.value,
            amount_days=amount_days,
            source_type=source_type.value,
            source_id=source_id,
        )
    )
    await session.flush()

    logger.info(
        "%s %s days on entitlement %s (taken=%s pending=%s remaining=%s)",
        entry_type.value,
        amount_days,
        entitlement.id,
        entitlement.taken,
        entitlement.pending,
        entitlement.remaining,
    )
    return entitlement


# ---------------------------------------------------------------------------
# Ledger operations
#
# Each one locks a single entitlement, validates before touching any field and
# flushes inside the caller's transaction. The caller commits.
# ---------------------------------------------------------------------------


async def reserve_pending(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    days: float,
    *,
    source_id: str,
    source_type: LedgerSourceType = LedgerSourceType.REQUEST,
) -> LeaveEntitlement:
    """Reserve days for an undecided request: pending increases."""
    _require_positive(days)
    entitlement = await _get_entitlement_for_update(session, employee_id, leave_type_id)

    if entitlement.remaining < days:
        raise InsufficientBalanceError("Insufficient leave balance")

    new_pending = entitlement.pending + days
    if compute_remaining(entitlement.yearly_entitlement, entitlement.carry_forward, entitlement.taken, new_pending) < 0:
        raise InsufficientBalanceError("Insufficient leave balance")

    return await _apply_movement(
        session,
        entitlement,
        entry_type=LedgerEntryType.RESERVE,
        amount_days=days,
        source_type=source_type,
        source_id=source_id,
        pending=new_pending,
    )


async def release_pending(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    days: float,
    *,
    source_id: str,
    source_type: LedgerSourceType = LedgerSourceType.REQUEST,
) -> LeaveEntitlement:
    """Give back reserved days: pending decreases."""
    _require_positive(days)
    entitlement = await _get_entitlement_for_update(session, employee_id, leave_type_id)

    if entitlement.pending < days:
        raise InconsistentStateError("Pending balance is inconsistent")

    return await _apply_movement(
        session,
        entitlement,
        entry_type=LedgerEntryType.RELEASE,
        amount_days=-days,
        source_type=source_type,
        source_id=source_id,
        pending=entitlement.pending - days,
    )


async def consume_pending_to_taken(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    days: float,
    *,
    source_id: str,
    source_type: LedgerSourceType = LedgerSourceType.REQUEST,
) -> LeaveEntitlement:
    """Convert reserved days into taken days on approval."""
    _require_positive(days)
    entitlement = await _get_entitlement_for_update(session, employee_id, leave_type_id)

    if entitlement.pending < days:
        raise InsufficientPendingError("Insufficient pending leave balance")

    new_pending = entitlement.pending - days
    new_taken = entitlement.taken + days
    if compute_remaining(entitlement.yearly_entitlement, entitlement.carry_forward, new_taken, new_pending) < 0:
        raise InsufficientBalanceError("Insufficient leave balance after approval")

    return await _apply_movement(
        session,
        entitlement,
        entry_type=LedgerEntryType.CONSUME,
        amount_days=days,
        source_type=source_type,
        source_id=source_id,
        taken=new_taken,
        pending=new_pending,
    )


async def revert_taken(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    days: float,
    *,
    source_id: str,
    source_type: LedgerSourceType = LedgerSourceType.REQUEST,
) -> LeaveEntitlement:
    """Give back days of a cancelled approved request: taken decreases."""
    _require_positive(days)
    entitlement = await _get_entitlement_for_update(session, employee_id, leave_type_id)

    if entitlement.taken < days:
        raise InconsistentStateError("Taken balance is inconsistent")

    return await _apply_movement(
        session,
        entitlement,
        entry_type=LedgerEntryType.REVERT,
        amount_days=-days,
        source_type=source_type,
        source_id=source_id,
        taken=entitlement.taken - days,
    )


async def adjust_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    delta_days: float,
    *,
    source_id: str,
    source_type: LedgerSourceType = LedgerSourceType.ADJUSTMENT,
) -> LeaveEntitlement:
    """Apply a signed correction to taken days."""
    if delta_days == 0:
        raise BadRequestError("Adjustment must change the balance")
    entitlement = await _get_entitlement_for_update(session, employee_id, leave_type_id)

    new_taken = entitlement.taken + delta_days
    if new_taken < 0:
        raise BadRequestError("Adjustment would make taken days negative")
    if compute_remaining(entitlement.yearly_entitlement, entitlement.carry_forward, new_taken, entitlement.pending) < 0:
        raise InsufficientBalanceError("Insufficient leave balance")

    return await _apply_movement(
        session,
        entitlement,
        entry_type=LedgerEntryType.ADJUSTMENT,
        amount_days=delta_days,
        source_type=source_type,
        source_id=source_id,
        taken=new_taken,
    )


async def accrue(
    session: AsyncSession,
    entitlement: LeaveEntitlement,
    days: float,
    *,
    source_id: str,
) -> LeaveEntitlement:
    """Add accrued days to the yearly allotment of an already locked entitlement.

    ``source_id`` names the accrual period; the ledger holds at most one accrual
    per entitlement and period.
    """
    _require_positive(days)
    return await _apply_movement(
        session,
        entitlement,
        entry_type=LedgerEntryType.ACCRUAL,
        amount_days=days,
        source_type=LedgerSourceType.SYSTEM,
        source_id=source_id,
        yearly_entitlement=entitlement.yearly_entitlement + days,
    )


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------


async def create_entitlement(
    session: AsyncSession,
    payload: CreateEntitlementPayload,
    actor_id: uuid.UUID | None = None,
) -> EntitlementResponse:
    """Create the single entitlement for an (employee, leave type) pair."""
    existing = await session.execute(
        select(LeaveEntitlement.id).where(
            col(LeaveEntitlement.employee_id) == payload.employee_id,
            col(LeaveEntitlement.leave_type_id) == payload.leave_type_id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("Entitlement already exists")

    entitlement = LeaveEntitlement(
        employee_id=payload.employee_id,
        leave_type_id=payload.leave_type_id,
        yearly_entitlement=payload.total_days,
        carry_forward=payload.carried_over_days,
        taken=0,
        pending=0,
        remaining=compute_remaining(payload.total_days, payload.carried_over_days, 0, 0),
    )
    session.add(entitlement)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("Entitlement already exists") from None

    await write_audit_log(
        session,
        actor_id=actor_id,
        entity_type=AuditEntityType.ENTITLEMENT,
        entity_id=entitlement.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(entitlement),
    )

    await session.commit()
    await session.refresh(entitlement)
    return build_entitlement_response(entitlement)


async def list_entitlements(session: AsyncSession) -> list[EntitlementResponse]:
    """All entitlements, grouped by employee."""
    result = await session.execute(
        select(LeaveEntitlement).order_by(
            col(LeaveEntitlement.employee_id),
            col(LeaveEntitlement.created_at),
        )
    )
    return [build_entitlement_response(e) for e in result.scalars().all()]


async def get_employee_entitlements(
    session: AsyncSession,
    employee_id: uuid.UUID,
) -> list[EntitlementResponse]:
    """All entitlements of one employee."""
    result = await session.execute(
        select(LeaveEntitlement)
        .where(col(LeaveEntitlement.employee_id) == employee_id)
        .order_by(col(LeaveEntitlement.created_at))
    )
    return [build_entitlement_response(e) for e in result.scalars().all()]


async def _sum_request_days(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    status: RequestStatus,
) -> float:
    result = await session.execute(
        select(func.coalesce(func.sum(LeaveRequest.duration_days), 0)).where(
            col(LeaveRequest.employee_id) == employee_id,
            col(LeaveRequest.leave_type_id) == leave_type_id,
            col(LeaveRequest.status) == status.value,
        )
    )
    return float(result.scalar_one())


async def update_entitlement(
    session: AsyncSession,
    employee_id: uuid.UUID,
    payload: UpdateEntitlementPayload,
    actor_id: uuid.UUID | None = None,
) -> EntitlementResponse:
    """Overwrite balance fields administratively, keeping remaining non-negative.

    Pending and taken days cannot drop below what live requests hold, otherwise
    those requests could no longer be released, consumed or reverted. The change
    is recorded as a SYSTEM adjustment whose amount is the drop in remaining.
    """
    entitlement = await _get_entitlement_for_update(session, employee_id, payload.leave_type_id)
    before_dict = model_to_audit_dict(entitlement)

    yearly = payload.total_days if payload.total_days is not None else entitlement.yearly_entitlement
    carry = payload.carry_forward if payload.carry_forward is not None else entitlement.carry_forward
    taken = payload.used_days if payload.used_days is not None else entitlement.taken
    pending = payload.pending_days if payload.pending_days is not None else entitlement.pending

    if payload.pending_days is not None:
        held = await _sum_request_days(session, employee_id, payload.leave_type_id, RequestStatus.PENDING)
        if pending < held:
            raise BadRequestError(f"pending_days cannot be below {held:g} days held by pending requests")
    if payload.used_days is not None:
        used = await _sum_request_days(session, employee_id, payload.leave_type_id, RequestStatus.APPROVED)
        if taken < used:
            raise BadRequestError(f"used_days cannot be below {used:g} days of approved requests")

    remaining = compute_remaining(yearly, carry, taken, pending)
    if remaining < 0:
        raise InsufficientBalanceError("Insufficient leave balance")

    await _apply_movement(
        session,
        entitlement,
        entry_type=LedgerEntryType.ADJUSTMENT,
        amount_days=entitlement.remaining - remaining,
        source_type=LedgerSourceType.SYSTEM,
        source_id="admin-update",
        taken=taken,
        pending=pending,
        yearly_entitlement=yearly,
        carry_forward=carry,
    )

    await write_audit_log(
        session,
        actor_id=actor_id,
        entity_type=AuditEntityType.ENTITLEMENT,
        entity_id=entitlement.id,
        action=AuditAction.UPDATE,
        before_json=before_dict,
        after_json=model_to_audit_dict(entitlement),
    )

    await session.commit()
    await session.refresh(entitlement)
    return build_entitlement_response(entitlement)


async def remove_employee_entitlements(
    session: AsyncSession,
    employee_id: uuid.UUID,
    actor_id: uuid.UUID | None = None,
) -> RemoveEntitlementsResponse:
    """Delete every entitlement of an employee, with its ledger history."""
    result = await session.execute(
        select(LeaveEntitlement).where(col(LeaveEntitlement.employee_id) == employee_id)
    )
    entitlements = list(result.scalars().all())

    for entitlement in entitlements:
        await write_audit_log(
            session,
            actor_id=actor_id,
            entity_type=AuditEntityType.ENTITLEMENT,
            entity_id=entitlement.id,
            action=AuditAction.DELETE,
            before_json=model_to_audit_dict(entitlement),
        )

    await session.execute(delete(LeaveLedgerEntry).where(col(LeaveLedgerEntry.employee_id) == employee_id))
    await session.execute(delete(LeaveEntitlement).where(col(LeaveEntitlement.employee_id) == employee_id))
    await session.commit()

    logger.info("Removed %d entitlements for employee %s", len(entitlements), employee_id)
    return RemoveEntitlementsResponse(deleted=len(entitlements))


async def get_ledger(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    offset: int = 0,
    limit: int = 50,
) -> LedgerListResponse:
    """Get paginated ledger entries for an employee + leave type, newest first."""
    base_filter = [
        col(LeaveLedgerEntry.employee_id) == employee_id,
        col(LeaveLedgerEntry.leave_type_id) == leave_type_id,
    ]

    count_result = await session.execute(select(func.count()).select_from(LeaveLedgerEntry).where(*base_filter))
    total = count_result.scalar_one()

    entries_result = await session.execute(
        select(LeaveLedgerEntry)
        .where(*base_filter)
        .order_by(col(LeaveLedgerEntry.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    entries = list(entries_result.scalars().all())

    return LedgerListResponse(
        items=[_build_ledger_entry_response(e) for e in entries],
        total=total,
    )


# ---------------------------------------------------------------------------
# Accruals
# ---------------------------------------------------------------------------


def accrual_source_id(period: str) -> str:
    """Ledger source id of the accrual for a ``YYYY-MM`` period."""
    return f"accrual:{period}"


async def run_accrual(
    session: AsyncSession,
    payload: AccrualRunPayload,
    today: date | None = None,
) -> AccrualRunResponse:
    """Accrue days on every entitlement matching the payload filters.

    All matching rows are locked and updated in one transaction. Entitlements that
    already received the accrual for the period are skipped.
    """
    days = payload.days if payload.days is not None else get_settings().monthly_accrual_days
    period = payload.period or (today or date.today()).strftime("%Y-%m")
    source_id = accrual_source_id(period)

    query = select(LeaveEntitlement).with_for_update()
    if payload.employee_id is not None:
        query = query.where(col(LeaveEntitlement.employee_id) == payload.employee_id)
    if payload.leave_type_id is not None:
        query = query.where(col(LeaveEntitlement.leave_type_id) == payload.leave_type_id)

    result = await session.execute(query)
    entitlements = list(result.scalars().all())

    credited_result = await session.execute(
        select(LeaveLedgerEntry.entitlement_id).where(
            col(LeaveLedgerEntry.entry_type) == LedgerEntryType.ACCRUAL.value,
            col(LeaveLedgerEntry.source_id) == source_id,
        )
    )
    credited = set(credited_result.scalars().all())

    processed = 0
    for entitlement in entitlements:
        if entitlement.id in credited:
            continue
        await accrue(session, entitlement, days, source_id=source_id)
        processed += 1

    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError(f"Accrual for {period} is already being applied") from None

    skipped = len(entitlements) - processed
    if skipped:
        logger.info("Accrual %s skipped %d already credited entitlements", period, skipped)
    return AccrualRunResponse(period=period, processed=processed, skipped=skipped, accrued_days=days)
