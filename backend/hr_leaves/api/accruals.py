# ruff: noqa: TC001
from __future__ import annotations

from fastapi import APIRouter

from hr_leaves.db import SessionDep
from hr_leaves.schemas.entitlement import AccrualRunPayload, AccrualRunResponse
from hr_leaves.services import entitlement as entitlement_service

accruals_router = APIRouter(prefix="/leave-accrual", tags=["accruals"])


@accruals_router.post("/run", response_model=AccrualRunResponse)
async def run_accrual(
    payload: AccrualRunPayload,
    session: SessionDep,
) -> AccrualRunResponse:
    """Trigger an accrual run on demand."""
    return await entitlement_service.run_accrual(session, payload)
