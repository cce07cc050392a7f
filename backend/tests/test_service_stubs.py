"""Tests for the in-memory Employee Directory."""

from __future__ import annotations

import uuid

from hr_leaves.services.employee import (
    EmployeeDirectory,
    EmployeeInfo,
    InMemoryEmployeeDirectory,
    get_employee_directory,
    set_employee_directory,
)


def _make_employee(name: str = "Jane", supervisor_position_id: uuid.UUID | None = None) -> EmployeeInfo:
    return EmployeeInfo(
        id=uuid.uuid4(),
        first_name=name,
        last_name="Doe",
        primary_position_id=uuid.uuid4(),
        supervisor_position_id=supervisor_position_id,
    )


async def test_find_by_id_not_found() -> None:
    directory = InMemoryEmployeeDirectory()
    assert await directory.find_by_id(uuid.uuid4()) is None


async def test_seed_and_find_by_id() -> None:
    directory = InMemoryEmployeeDirectory()
    emp = _make_employee()
    directory.seed(emp)

    result = await directory.find_by_id(emp.id)
    assert result is not None
    assert result.first_name == "Jane"
    assert result.status == "ACTIVE"


async def test_find_by_supervisor_position() -> None:
    directory = InMemoryEmployeeDirectory()
    position = uuid.uuid4()
    alice = _make_employee("Alice", position)
    bob = _make_employee("Bob", position)
    directory.seed(alice)
    directory.seed(bob)
    directory.seed(_make_employee("Carol", uuid.uuid4()))

    result = await directory.find_by_supervisor_position(position)
    assert {e.id for e in result} == {alice.id, bob.id}
    assert await directory.find_by_supervisor_position(uuid.uuid4()) == []


def test_in_memory_directory_satisfies_protocol() -> None:
    assert isinstance(InMemoryEmployeeDirectory(), EmployeeDirectory)


def test_set_employee_directory() -> None:
    original = get_employee_directory()
    replacement = InMemoryEmployeeDirectory()
    set_employee_directory(replacement)
    try:
        assert get_employee_directory() is replacement
    finally:
        set_employee_directory(original)
