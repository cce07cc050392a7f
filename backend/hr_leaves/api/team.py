from __future__ import annotations

from fastapi import APIRouter

from hr_leaves.api.deps import CallerIdDep, DirectoryDep
from hr_leaves.db import SessionDep
from hr_leaves.schemas.team import TeamLeaveSummary
from hr_leaves.services import team as team_service

team_router = APIRouter(prefix="/manager", tags=["team"])


@team_router.get("/team-leaves", response_model=list[TeamLeaveSummary])
async def get_team_leaves(
    session: SessionDep,
    caller_id: CallerIdDep,
    directory: DirectoryDep,
) -> list[TeamLeaveSummary]:
    """Balances and upcoming approved leave of the caller's direct reports."""
    return await team_service.get_team_leaves(session, directory, caller_id)
