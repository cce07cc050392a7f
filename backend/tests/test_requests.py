"""Tests for the leave request workflow: create, update, approve, reject, cancel,
balance invariants, history filtering and audit.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy import func, select
from sqlmodel import col

from hr_leaves.models.audit import AuditLog
from hr_leaves.models.ledger import LeaveLedgerEntry
from hr_leaves.models.request import LeaveRequest

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

ENTITLEMENT_URL = "/leave-entitlement"
REQUESTS_URL = "/leave-request"
MANAGER_ID = uuid.uuid4()


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


async def _create_entitlement(
    client: AsyncClient,
    total_days: float = 20,
    employee_id: uuid.UUID | None = None,
    leave_type_id: uuid.UUID | None = None,
) -> tuple[str, str]:
    """Create an entitlement and return (employee_id, leave_type_id)."""
    employee_id = employee_id or uuid.uuid4()
    leave_type_id = leave_type_id or uuid.uuid4()
    resp = await client.post(
        ENTITLEMENT_URL,
        json={"employee_id": str(employee_id), "leave_type_id": str(leave_type_id), "total_days": total_days},
    )
    assert resp.status_code == 201, resp.text
    return str(employee_id), str(leave_type_id)


async def _get_entitlement(client: AsyncClient, employee_id: str, leave_type_id: str) -> dict[str, Any]:
    resp = await client.get(f"{ENTITLEMENT_URL}/{employee_id}")
    assert resp.status_code == 200
    [entitlement] = [e for e in resp.json() if e["leave_type_id"] == leave_type_id]
    return entitlement


def _request_payload(
    employee_id: str,
    leave_type_id: str,
    start_date: str = "2025-03-03",
    end_date: str = "2025-03-07",
    **extra: Any,
) -> dict[str, Any]:
    """Default is 5 calendar days, Mon Mar 3 to Fri Mar 7 2025."""
    return {
        "employee_id": employee_id,
        "leave_type_id": leave_type_id,
        "start_date": start_date,
        "end_date": end_date,
        **extra,
    }


async def _create_request(client: AsyncClient, employee_id: str, leave_type_id: str, **kwargs: Any) -> dict[str, Any]:
    resp = await client.post(REQUESTS_URL, json=_request_payload(employee_id, leave_type_id, **kwargs))
    assert resp.status_code == 201, resp.text
    result: dict[str, Any] = resp.json()
    return result


async def _approve(client: AsyncClient, request_id: str, comment: str | None = None) -> Any:
    body: dict[str, Any] = {"approver_id": str(MANAGER_ID)}
    if comment is not None:
        body["comment"] = comment
    return await client.put(f"{REQUESTS_URL}/{request_id}/approve/manager", json=body)


async def _reject(client: AsyncClient, request_id: str, comment: str | None = None) -> Any:
    body: dict[str, Any] = {"approver_id": str(MANAGER_ID)}
    if comment is not None:
        body["comment"] = comment
    return await client.put(f"{REQUESTS_URL}/{request_id}/reject/manager", json=body)


def _balance(entitlement: dict[str, Any]) -> tuple[float, float, float]:
    return entitlement["taken"], entitlement["pending"], entitlement["remaining"]


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


async def test_create_reserves_pending_then_approve_consumes(async_client: AsyncClient) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client, total_days=20)

    request = await _create_request(async_client, employee_id, leave_type_id)
    assert request["status"] == "PENDING"
    assert request["duration_days"] == 5
    assert request["dates"] == {"from": "2025-03-03", "to": "2025-03-07"}
    assert request["approval_flow"] == []
    assert _balance(await _get_entitlement(async_client, employee_id, leave_type_id)) == (0, 5, 15)

    resp = await _approve(async_client, request["id"])
    assert resp.status_code == 200
    approved = resp.json()
    assert approved["status"] == "APPROVED"
    assert _balance(await _get_entitlement(async_client, employee_id, leave_type_id)) == (5, 0, 15)

    [record] = approved["approval_flow"]
    assert record["role"] == "manager"
    assert record["status"] == "approved"
    assert record["decided_by"] == str(MANAGER_ID)
    assert record["decided_at"] is not None


async def test_create_exceeding_balance_persists_nothing(
    async_client: AsyncClient,
    db_session: AsyncSession,
) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client, total_days=20)

    resp = await async_client.post(
        REQUESTS_URL,
        json=_request_payload(employee_id, leave_type_id, start_date="2025-03-01", end_date="2025-03-25"),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "InsufficientBalanceError"

    entitlement = await _get_entitlement(async_client, employee_id, leave_type_id)
    assert _balance(entitlement) == (0, 0, 20)
    assert entitlement["version"] == 1

    count = await db_session.execute(select(func.count()).select_from(LeaveRequest))
    assert count.scalar_one() == 0


async def test_create_exactly_remaining_then_one_more_day(async_client: AsyncClient) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client, total_days=5)

    await _create_request(async_client, employee_id, leave_type_id)
    assert _balance(await _get_entitlement(async_client, employee_id, leave_type_id))[2] == 0

    resp = await async_client.post(
        REQUESTS_URL,
        json=_request_payload(employee_id, leave_type_id, start_date="2025-04-01", end_date="2025-04-01"),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "InsufficientBalanceError"


async def test_create_with_reversed_dates_is_bad_request(async_client: AsyncClient) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client)

    resp = await async_client.post(
        REQUESTS_URL,
        json=_request_payload(employee_id, leave_type_id, start_date="2025-03-07", end_date="2025-03-03"),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "BadRequestError"


async def test_create_without_entitlement_is_not_found(async_client: AsyncClient) -> None:
    resp = await async_client.post(REQUESTS_URL, json=_request_payload(str(uuid.uuid4()), str(uuid.uuid4())))
    assert resp.status_code == 404
    assert resp.json()["error"] == "NotFoundError"


async def test_create_accepts_camel_case_fields(async_client: AsyncClient) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client)

    resp = await async_client.post(
        REQUESTS_URL,
        json={
            "employeeId": employee_id,
            "leaveTypeId": leave_type_id,
            "startDate": "2025-05-05",
            "endDate": "2025-05-05",
            "justification": "Dentist",
        },
    )
    assert resp.status_code == 201
    assert resp.json()["justification"] == "Dentist"
    assert resp.json()["duration_days"] == 1


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


async def test_update_moves_reservation_by_delta(async_client: AsyncClient) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client, total_days=10)
    request = await _create_request(
        async_client, employee_id, leave_type_id, start_date="2025-06-01", end_date="2025-06-06"
    )
    assert _balance(await _get_entitlement(async_client, employee_id, leave_type_id)) == (0, 6, 4)

    resp = await async_client.put(f"{REQUESTS_URL}/{request['id']}", json={"end_date": "2025-06-08"})
    assert resp.status_code == 200
    assert resp.json()["duration_days"] == 8
    assert _balance(await _get_entitlement(async_client, employee_id, leave_type_id)) == (0, 8, 2)

    resp = await async_client.put(f"{REQUESTS_URL}/{request['id']}", json={"end_date": "2025-06-12"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "InsufficientBalanceError"
    assert _balance(await _get_entitlement(async_client, employee_id, leave_type_id)) == (0, 8, 2)

    resp = await async_client.get(f"{REQUESTS_URL}/{request['id']}")
    assert resp.json()["duration_days"] == 8
    assert resp.json()["dates"]["to"] == "2025-06-08"


async def test_update_shorter_releases_days(async_client: AsyncClient) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client, total_days=10)
    request = await _create_request(async_client, employee_id, leave_type_id)

    resp = await async_client.put(
        f"{REQUESTS_URL}/{request['id']}",
        json={"start_date": "2025-03-05", "justification": "Shortened"},
    )
    assert resp.status_code == 200
    assert resp.json()["duration_days"] == 3
    assert resp.json()["justification"] == "Shortened"
    assert _balance(await _get_entitlement(async_client, employee_id, leave_type_id)) == (0, 3, 7)


async def test_update_non_pending_is_invalid_state(async_client: AsyncClient) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client)
    request = await _create_request(async_client, employee_id, leave_type_id)
    await _approve(async_client, request["id"])

    resp = await async_client.put(f"{REQUESTS_URL}/{request['id']}", json={"end_date": "2025-03-08"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidStateError"


async def test_update_missing_request_is_not_found(async_client: AsyncClient) -> None:
    resp = await async_client.put(f"{REQUESTS_URL}/{uuid.uuid4()}", json={"justification": "x"})
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Reject / cancel
# ---------------------------------------------------------------------------


async def test_reject_releases_pending(async_client: AsyncClient) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client, total_days=20)
    request = await _create_request(async_client, employee_id, leave_type_id)

    resp = await _reject(async_client, request["id"])
    assert resp.status_code == 200
    rejected = resp.json()
    assert rejected["status"] == "REJECTED"
    [record] = rejected["approval_flow"]
    assert record["role"] == "manager"
    assert record["status"] == "rejected"
    assert record["comment"] == "rejected"
    assert _balance(await _get_entitlement(async_client, employee_id, leave_type_id)) == (0, 0, 20)


async def test_reject_records_reason(async_client: AsyncClient) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client)
    request = await _create_request(async_client, employee_id, leave_type_id)

    resp = await _reject(async_client, request["id"], comment="Team offsite")
    assert resp.json()["approval_flow"][0]["comment"] == "Team offsite"


async def test_cancel_pending_round_trip(async_client: AsyncClient) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client, total_days=20)
    before = await _get_entitlement(async_client, employee_id, leave_type_id)
    request = await _create_request(async_client, employee_id, leave_type_id)

    resp = await async_client.put(f"{REQUESTS_URL}/{request['id']}/cancel", json={})
    assert resp.status_code == 200
    cancelled = resp.json()
    assert cancelled["status"] == "CANCELLED"
    assert cancelled["approval_flow"][-1]["role"] == "system"
    assert cancelled["approval_flow"][-1]["status"] == "cancelled"

    after = await _get_entitlement(async_client, employee_id, leave_type_id)
    assert _balance(after) == _balance(before)


async def test_cancel_approved_reverts_taken(async_client: AsyncClient) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client, total_days=20)
    request = await _create_request(async_client, employee_id, leave_type_id)
    await _approve(async_client, request["id"])
    assert _balance(await _get_entitlement(async_client, employee_id, leave_type_id)) == (5, 0, 15)

    actor = str(uuid.uuid4())
    resp = await async_client.put(f"{REQUESTS_URL}/{request['id']}/cancel", json={"actor_id": actor})
    assert resp.status_code == 200
    assert resp.json()["approval_flow"][-1]["decided_by"] == actor
    assert [r["status"] for r in resp.json()["approval_flow"]] == ["approved", "cancelled"]
    assert _balance(await _get_entitlement(async_client, employee_id, leave_type_id)) == (0, 0, 20)


async def test_cancel_without_body(async_client: AsyncClient) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client)
    request = await _create_request(async_client, employee_id, leave_type_id)

    resp = await async_client.put(f"{REQUESTS_URL}/{request['id']}/cancel")
    assert resp.status_code == 200
    assert resp.json()["approval_flow"][-1]["decided_by"] is None


@pytest.mark.parametrize("finish", ["reject", "cancel"])
async def test_terminal_requests_cannot_change(async_client: AsyncClient, finish: str) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client)
    request = await _create_request(async_client, employee_id, leave_type_id)
    if finish == "reject":
        await _reject(async_client, request["id"])
    else:
        await async_client.put(f"{REQUESTS_URL}/{request['id']}/cancel", json={})
    before = await _get_entitlement(async_client, employee_id, leave_type_id)

    for resp in (
        await _approve(async_client, request["id"]),
        await _reject(async_client, request["id"]),
        await async_client.put(f"{REQUESTS_URL}/{request['id']}/cancel", json={}),
    ):
        assert resp.status_code == 400
        assert resp.json()["error"] == "InvalidStateError"

    after = await _get_entitlement(async_client, employee_id, leave_type_id)
    assert after == before


async def test_approve_twice_is_invalid_state(async_client: AsyncClient) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client)
    request = await _create_request(async_client, employee_id, leave_type_id)
    await _approve(async_client, request["id"])

    resp = await _approve(async_client, request["id"])
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidStateError"
    assert _balance(await _get_entitlement(async_client, employee_id, leave_type_id)) == (5, 0, 15)


async def test_decision_on_missing_request_is_not_found(async_client: AsyncClient) -> None:
    resp = await _approve(async_client, str(uuid.uuid4()))
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Leave request not found"


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def test_get_and_list_requests(async_client: AsyncClient) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client, total_days=30)
    first = await _create_request(async_client, employee_id, leave_type_id)
    second = await _create_request(
        async_client, employee_id, leave_type_id, start_date="2025-04-01", end_date="2025-04-02"
    )
    await _approve(async_client, second["id"])

    resp = await async_client.get(f"{REQUESTS_URL}/{first['id']}")
    assert resp.status_code == 200
    assert resp.json()["id"] == first["id"]

    resp = await async_client.get(REQUESTS_URL, params={"employee_id": employee_id})
    data = resp.json()
    assert data["total"] == 2
    assert [r["id"] for r in data["items"]] == [second["id"], first["id"]]

    resp = await async_client.get(REQUESTS_URL, params={"status": "APPROVED"})
    assert [r["id"] for r in resp.json()["items"]] == [second["id"]]


async def test_history_filters_are_conjunctive(async_client: AsyncClient) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client, total_days=30)
    march = await _create_request(async_client, employee_id, leave_type_id)
    april = await _create_request(
        async_client, employee_id, leave_type_id, start_date="2025-04-07", end_date="2025-04-08"
    )
    may = await _create_request(async_client, employee_id, leave_type_id, start_date="2025-05-12", end_date="2025-05-12")
    await _approve(async_client, april["id"])
    other_employee, other_type = await _create_entitlement(async_client)
    await _create_request(async_client, other_employee, other_type)

    resp = await async_client.get(f"{REQUESTS_URL}/history", params={"employeeId": employee_id})
    assert resp.status_code == 200
    assert [r["id"] for r in resp.json()] == [may["id"], april["id"], march["id"]]

    resp = await async_client.get(
        f"{REQUESTS_URL}/history",
        params={"employeeId": employee_id, "startDate": "2025-04-01", "endDate": "2025-04-30"},
    )
    assert [r["id"] for r in resp.json()] == [april["id"]]

    resp = await async_client.get(
        f"{REQUESTS_URL}/history",
        params={"employeeId": employee_id, "status": "PENDING", "leaveTypeId": leave_type_id},
    )
    assert [r["id"] for r in resp.json()] == [may["id"], march["id"]]


async def test_history_range_excludes_straddling_requests(async_client: AsyncClient) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client)
    await _create_request(async_client, employee_id, leave_type_id, start_date="2025-03-30", end_date="2025-04-02")

    resp = await async_client.get(
        f"{REQUESTS_URL}/history",
        params={"startDate": "2025-04-01", "endDate": "2025-04-30"},
    )
    assert resp.json() == []


# ---------------------------------------------------------------------------
# Ledger + audit trail
# ---------------------------------------------------------------------------


async def test_workflow_writes_ledger_and_audit(async_client: AsyncClient, db_session: AsyncSession) -> None:
    employee_id, leave_type_id = await _create_entitlement(async_client)
    request = await _create_request(async_client, employee_id, leave_type_id)
    await _approve(async_client, request["id"])
    await async_client.put(f"{REQUESTS_URL}/{request['id']}/cancel", json={})

    result = await db_session.execute(
        select(LeaveLedgerEntry)
        .where(col(LeaveLedgerEntry.source_id) == request["id"])
        .order_by(col(LeaveLedgerEntry.created_at))
    )
    assert [e.entry_type for e in result.scalars().all()] == ["RESERVE", "CONSUME", "REVERT"]

    result = await db_session.execute(
        select(AuditLog)
        .where(col(AuditLog.entity_id) == uuid.UUID(request["id"]))
        .order_by(col(AuditLog.created_at))
    )
    logs = list(result.scalars().all())
    assert [log.action for log in logs] == ["CREATE", "APPROVE", "CANCEL"]
    assert logs[0].before_json is None
    assert logs[1].before_json is not None
    assert logs[1].before_json["status"] == "PENDING"
    assert logs[1].after_json is not None
    assert logs[1].after_json["status"] == "APPROVED"
