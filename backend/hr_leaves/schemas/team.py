# ruff: noqa: TC001
from __future__ import annotations

from pydantic import BaseModel

from hr_leaves.schemas.entitlement import EntitlementResponse
from hr_leaves.schemas.request import LeaveRequestResponse
from hr_leaves.services.employee import EmployeeInfo


class TeamLeaveSummary(BaseModel):
    """Balances and upcoming approved leave for one direct report."""

    employee: EmployeeInfo
    entitlements: list[EntitlementResponse]
    upcoming_requests: list[LeaveRequestResponse]
