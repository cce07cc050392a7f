# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from hr_leaves.api.deps import AuthDep
from hr_leaves.db import SessionDep
from hr_leaves.schemas.entitlement import (
    CreateEntitlementPayload,
    EntitlementResponse,
    LedgerListResponse,
    RemoveEntitlementsResponse,
    UpdateEntitlementPayload,
)
from hr_leaves.services import entitlement as entitlement_service

entitlements_router = APIRouter(prefix="/leave-entitlement", tags=["entitlements"])


@entitlements_router.post("", response_model=EntitlementResponse, status_code=status.HTTP_201_CREATED)
async def create_entitlement(
    payload: CreateEntitlementPayload,
    session: SessionDep,
    auth: AuthDep,
) -> EntitlementResponse:
    """Create an entitlement for an employee and leave type."""
    return await entitlement_service.create_entitlement(session, payload, auth.user_id)


@entitlements_router.get("", response_model=list[EntitlementResponse])
async def list_entitlements(session: SessionDep) -> list[EntitlementResponse]:
    """List every entitlement."""
    return await entitlement_service.list_entitlements(session)


@entitlements_router.get("/{employee_id}", response_model=list[EntitlementResponse])
async def get_employee_entitlements(
    employee_id: uuid.UUID,
    session: SessionDep,
) -> list[EntitlementResponse]:
    """List an employee's entitlements."""
    return await entitlement_service.get_employee_entitlements(session, employee_id)


@entitlements_router.put("/{employee_id}", response_model=EntitlementResponse)
async def update_entitlement(
    employee_id: uuid.UUID,
    payload: UpdateEntitlementPayload,
    session: SessionDep,
    auth: AuthDep,
) -> EntitlementResponse:
    """Overwrite balance fields of one of an employee's entitlements."""
    return await entitlement_service.update_entitlement(session, employee_id, payload, auth.user_id)


@entitlements_router.delete("/{employee_id}", response_model=RemoveEntitlementsResponse)
async def remove_employee_entitlements(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> RemoveEntitlementsResponse:
    """Delete all of an employee's entitlements."""
    return await entitlement_service.remove_employee_entitlements(session, employee_id, auth.user_id)


@entitlements_router.get("/{employee_id}/ledger", response_model=LedgerListResponse)
async def get_ledger(
    employee_id: uuid.UUID,
    session: SessionDep,
    leave_type_id: uuid.UUID = Query(),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LedgerListResponse:
    """Get paginated ledger entries for an employee and leave type."""
    return await entitlement_service.get_ledger(session, employee_id, leave_type_id, offset, limit)
