# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

from hr_leaves.exceptions import BadRequestError, NotFoundError
from hr_leaves.schemas.team import TeamLeaveSummary
from hr_leaves.services.entitlement import get_employee_entitlements
from hr_leaves.services.request import get_upcoming_approved

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hr_leaves.services.employee import EmployeeDirectory


async def get_team_leaves(
    session: AsyncSession,
    directory: EmployeeDirectory,
    manager_id: uuid.UUID,
    today: date | None = None,
) -> list[TeamLeaveSummary]:
    """Balances and upcoming approved leave for each direct report of a manager.

    Direct reports are the employees whose supervisor position is the manager's
    primary position.
    """
    manager = await directory.find_by_id(manager_id)
    if manager is None:
        raise NotFoundError("Manager not found")
    if manager.primary_position_id is None:
        raise BadRequestError("Manager has no primary position")

    reports = await directory.find_by_supervisor_position(manager.primary_position_id)

    summaries: list[TeamLeaveSummary] = []
    for employee in reports:
        summaries.append(
            TeamLeaveSummary(
                employee=employee,
                entitlements=await get_employee_entitlements(session, employee.id),
                upcoming_requests=await get_upcoming_approved(session, employee.id, today),
            )
        )
    return summaries
