# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


class EmployeeInfo(BaseModel):
    """Employee profile fields exposed by the Employee Directory."""

    id: uuid.UUID
    first_name: str
    last_name: str
    status: str = "ACTIVE"
    primary_position_id: uuid.UUID | None = None
    supervisor_position_id: uuid.UUID | None = None  # the manager's primary position


@runtime_checkable
class EmployeeDirectory(Protocol):
    """Interface for the Employee Directory."""

    async def find_by_id(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch an employee profile. Returns None if not found."""
        ...

    async def find_by_supervisor_position(self, position_id: uuid.UUID) -> list[EmployeeInfo]:
        """List employees whose supervisor position is ``position_id``."""
        ...


class InMemoryEmployeeDirectory:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._employees: dict[uuid.UUID, EmployeeInfo] = {}

    def seed(self, employee: EmployeeInfo) -> None:
        """Seed an employee for testing."""
        self._employees[employee.id] = employee

    async def find_by_id(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch an employee profile. Returns None if not found."""
        return self._employees.get(employee_id)

    async def find_by_supervisor_position(self, position_id: uuid.UUID) -> list[EmployeeInfo]:
        """List employees whose supervisor position is ``position_id``."""
        return [e for e in self._employees.values() if e.supervisor_position_id == position_id]


_employee_directory: EmployeeDirectory = InMemoryEmployeeDirectory()


def get_employee_directory() -> EmployeeDirectory:
    """FastAPI dependency for the Employee Directory."""
    return _employee_directory


def set_employee_directory(directory: EmployeeDirectory) -> None:
    """Override the directory (for testing or production wiring)."""
    global _employee_directory
    _employee_directory = directory
