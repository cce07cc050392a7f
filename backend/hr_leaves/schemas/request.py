# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from hr_leaves.models.enums import Decision, RequestStatus
from hr_leaves.schemas.common import Payload

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateLeaveRequestPayload(Payload):
    """Request body for creating a leave request."""

    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    justification: str | None = Field(default=None, max_length=2000)
    attachment_id: uuid.UUID | None = None


class UpdateLeaveRequestPayload(Payload):
    """Request body for editing a pending leave request."""

    start_date: date | None = None
    end_date: date | None = None
    justification: str | None = Field(default=None, max_length=2000)
    attachment_id: uuid.UUID | None = None


class ManagerDecisionPayload(Payload):
    """Request body for manager approve/reject actions."""

    approver_id: uuid.UUID
    comment: str | None = Field(default=None, max_length=1000)


class CancelPayload(Payload):
    """Request body for cancelling a request."""

    actor_id: uuid.UUID | None = None


class BulkDecisionItem(Payload):
    """One decision in a bulk processing batch."""

    id: uuid.UUID
    decision: Decision
    reason: str | None = Field(default=None, max_length=1000)


class BulkDecisionPayload(Payload):
    """Request body for bulk processing of pending requests."""

    approver_id: uuid.UUID
    requests: list[BulkDecisionItem] = Field(min_length=1)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class DateRange(BaseModel):
    """Inclusive calendar-day range, serialized as ``{"from": ..., "to": ...}``."""

    model_config = ConfigDict(populate_by_name=True)

    from_: date = Field(alias="from")
    to: date


class DecisionRecord(BaseModel):
    """One entry of a request's approval flow."""

    role: str
    status: str
    decided_by: uuid.UUID | None = None
    decided_at: datetime
    comment: str | None = None


class LeaveRequestResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    dates: DateRange
    duration_days: int
    status: RequestStatus
    justification: str | None
    attachment_id: uuid.UUID | None
    approval_flow: list[DecisionRecord]
    created_at: datetime


class LeaveRequestListResponse(BaseModel):
    """Paginated list of leave requests."""

    items: list[LeaveRequestResponse]
    total: int


class BulkFailure(BaseModel):
    """A bulk item that could not be processed."""

    id: uuid.UUID
    error: str
    detail: str
    status_code: int


class BulkProcessResult(BaseModel):
    """Outcome of a best-effort bulk run."""

    succeeded: list[LeaveRequestResponse]
    failed: list[BulkFailure]
