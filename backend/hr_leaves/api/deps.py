# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header

from hr_leaves.exceptions import UnauthorizedError
from hr_leaves.schemas.auth import AuthContext
from hr_leaves.services.employee import EmployeeDirectory, get_employee_directory


async def get_auth_context(
    x_user_id: uuid.UUID | None = Header(default=None),
    x_role: str = Header(default="employee"),
) -> AuthContext:
    """Extract dev auth context from request headers."""
    return AuthContext(user_id=x_user_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_user_id(
    auth: AuthDep,
) -> uuid.UUID:
    """Require a caller identity for the request."""
    if auth.user_id is None:
        raise UnauthorizedError("X-User-Id header is required")
    return auth.user_id


CallerIdDep = Annotated[uuid.UUID, Depends(require_user_id)]

DirectoryDep = Annotated[EmployeeDirectory, Depends(get_employee_directory)]
