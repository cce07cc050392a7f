# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query, status

from hr_leaves.db import SessionDep
from hr_leaves.models.enums import RequestStatus
from hr_leaves.schemas.request import (
    BulkDecisionPayload,
    BulkProcessResult,
    CancelPayload,
    CreateLeaveRequestPayload,
    LeaveRequestListResponse,
    LeaveRequestResponse,
    ManagerDecisionPayload,
    UpdateLeaveRequestPayload,
)
from hr_leaves.services import request as request_service

requests_router = APIRouter(prefix="/leave-request", tags=["requests"])


@requests_router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: CreateLeaveRequestPayload,
    session: SessionDep,
) -> LeaveRequestResponse:
    """Submit a new leave request."""
    return await request_service.create_request(session, payload)


@requests_router.get("", response_model=LeaveRequestListResponse)
async def list_requests(
    session: SessionDep,
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
    leave_type_id: uuid.UUID | None = Query(default=None),
    employee_id: uuid.UUID | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LeaveRequestListResponse:
    """List leave requests with optional filters."""
    return await request_service.list_requests(session, status_filter, leave_type_id, employee_id, offset, limit)


@requests_router.get("/history", response_model=list[LeaveRequestResponse])
async def get_history(
    session: SessionDep,
    employee_id: uuid.UUID | None = Query(default=None, alias="employeeId"),
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
    leave_type_id: uuid.UUID | None = Query(default=None, alias="leaveTypeId"),
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
) -> list[LeaveRequestResponse]:
    """Leave history matching every given filter, newest first."""
    return await request_service.filter_history(
        session, employee_id, status_filter, leave_type_id, start_date, end_date
    )


@requests_router.put("/bulk", response_model=list[LeaveRequestResponse])
async def bulk_process(
    payload: BulkDecisionPayload,
    session: SessionDep,
) -> list[LeaveRequestResponse]:
    """Approve or reject several requests in order, stopping at the first failure."""
    return await request_service.bulk_process(session, payload)


@requests_router.put("/bulk/partial", response_model=BulkProcessResult)
async def bulk_process_partial(
    payload: BulkDecisionPayload,
    session: SessionDep,
) -> BulkProcessResult:
    """Approve or reject several requests, reporting failures per item."""
    return await request_service.bulk_process_partial(session, payload)


@requests_router.get("/{request_id}", response_model=LeaveRequestResponse)
async def get_request(
    request_id: uuid.UUID,
    session: SessionDep,
) -> LeaveRequestResponse:
    """Get a single leave request."""
    return await request_service.get_request(session, request_id)


@requests_router.put("/{request_id}", response_model=LeaveRequestResponse)
async def update_request(
    request_id: uuid.UUID,
    payload: UpdateLeaveRequestPayload,
    session: SessionDep,
) -> LeaveRequestResponse:
    """Edit a pending leave request."""
    return await request_service.update_request(session, request_id, payload)


@requests_router.put("/{request_id}/approve/manager", response_model=LeaveRequestResponse)
async def manager_approve(
    request_id: uuid.UUID,
    payload: ManagerDecisionPayload,
    session: SessionDep,
) -> LeaveRequestResponse:
    """Approve a pending leave request."""
    return await request_service.manager_approve(session, request_id, payload.approver_id, payload.comment)


@requests_router.put("/{request_id}/reject/manager", response_model=LeaveRequestResponse)
async def manager_reject(
    request_id: uuid.UUID,
    payload: ManagerDecisionPayload,
    session: SessionDep,
) -> LeaveRequestResponse:
    """Reject a pending leave request."""
    return await request_service.manager_reject(session, request_id, payload.approver_id, payload.comment)


@requests_router.put("/{request_id}/cancel", response_model=LeaveRequestResponse)
async def cancel_request(
    request_id: uuid.UUID,
    session: SessionDep,
    payload: CancelPayload | None = None,
) -> LeaveRequestResponse:
    """Cancel a pending or approved leave request."""
    actor_id = payload.actor_id if payload is not None else None
    return await request_service.cancel_request(session, request_id, actor_id)
