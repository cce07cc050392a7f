# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from hr_leaves.models.enums import LedgerEntryType, LedgerSourceType
from hr_leaves.schemas.common import Payload

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateEntitlementPayload(Payload):
    """Request body for creating an entitlement."""

    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    total_days: float = Field(ge=0)
    carried_over_days: float = Field(default=0, ge=0)


class UpdateEntitlementPayload(Payload):
    """Request body for overwriting an entitlement's balance fields.

    Only the fields that are set are changed; ``remaining`` is recomputed.
    """

    leave_type_id: uuid.UUID
    total_days: float | None = Field(default=None, ge=0)
    carry_forward: float | None = Field(default=None, ge=0)
    used_days: float | None = Field(default=None, ge=0)
    pending_days: float | None = Field(default=None, ge=0)


class AccrualRunPayload(Payload):
    """Request body for triggering an accrual run. Omitted filters match everything.

    An entitlement is credited at most once per ``period`` (``YYYY-MM``, default: the
    current month); entitlements already credited for it are skipped.
    """

    employee_id: uuid.UUID | None = None
    leave_type_id: uuid.UUID | None = None
    days: float | None = Field(default=None, gt=0)
    period: str | None = Field(default=None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class EntitlementResponse(BaseModel):
    """A single entitlement balance."""

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    yearly_entitlement: float
    carry_forward: float
    taken: float
    pending: float
    remaining: float
    version: int
    created_at: datetime
    updated_at: datetime | None


class RemoveEntitlementsResponse(BaseModel):
    """Result of an employee-scoped entitlement removal."""

    deleted: int


class LedgerEntryResponse(BaseModel):
    """A single ledger entry."""

    id: uuid.UUID
    entitlement_id: uuid.UUID
    leave_type_id: uuid.UUID
    entry_type: LedgerEntryType
    amount_days: float
    source_type: LedgerSourceType
    source_id: str
    created_at: datetime


class LedgerListResponse(BaseModel):
    """Paginated ledger entries."""

    items: list[LedgerEntryResponse]
    total: int


class AccrualRunResponse(BaseModel):
    """Summary of an accrual run."""

    period: str
    processed: int
    skipped: int
    accrued_days: float
