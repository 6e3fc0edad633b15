"""API tests for balance reads, HR adjustments and the balance ledger."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlmodel import col

from leavedesk.models.audit import AuditLog
from leavedesk.models.balance import LeaveBalance
from leavedesk.models.employee import Employee
from leavedesk.models.enums import Role

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from leavedesk.schemas.auth import Principal
    from tests.conftest import Staff

BALANCE_URL = "/leave/my-balance"
ADJUSTMENTS_URL = "/leave/adjustments"
LEDGER_URL = "/leave/ledger"


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


def _headers(principal: Principal) -> dict[str, str]:
    return {"X-User-Id": str(principal.id)}


async def _adjust(
    client: AsyncClient,
    actor: Principal,
    employee_id: uuid.UUID,
    days: int,
    reason: str = "Annual grant",
) -> Any:
    return await client.post(
        ADJUSTMENTS_URL,
        json={"employee_id": str(employee_id), "days": days, "reason": reason},
        headers=_headers(actor),
    )


# ---------------------------------------------------------------------------
# Balance reads
# ---------------------------------------------------------------------------


async def test_my_balance_defaults(async_client: AsyncClient, staff: Staff) -> None:
    resp = await async_client.get(BALANCE_URL, headers=_headers(staff.alice))
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] is True
    balance = body["data"]["leave_balance"]
    assert balance["employee_id"] == str(staff.alice.id)
    assert balance["current_balance"] == 24
    assert balance["used_days"] == 0
    assert balance["pending_days"] == 0
    assert balance["available_days"] == 24


async def test_manager_reads_employee_balance(async_client: AsyncClient, staff: Staff) -> None:
    resp = await async_client.get(
        BALANCE_URL, params={"employee_id": str(staff.bob.id)}, headers=_headers(staff.manager)
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["leave_balance"]["employee_id"] == str(staff.bob.id)


async def test_employee_cannot_read_other_balance(async_client: AsyncClient, staff: Staff) -> None:
    resp = await async_client.get(
        BALANCE_URL, params={"employee_id": str(staff.bob.id)}, headers=_headers(staff.alice)
    )
    assert resp.status_code == 403
    assert resp.json()["error"] == "AuthorizationError"


async def test_balance_of_unknown_employee(async_client: AsyncClient, staff: Staff) -> None:
    resp = await async_client.get(
        BALANCE_URL, params={"employee_id": str(uuid.uuid4())}, headers=_headers(staff.hr)
    )
    assert resp.status_code == 404


async def test_missing_balance_is_provisioned_on_read(
    async_client: AsyncClient,
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    """An employee created outside the directory API gets the default balance on first read."""
    employee_id = uuid.uuid4()
    async with session_factory() as session:
        session.add(Employee(id=employee_id, name="Nia New", email="nia@example.com", role=Role.EMPLOYEE))
        await session.commit()

    resp = await async_client.get(BALANCE_URL, headers={"X-User-Id": str(employee_id)})
    assert resp.status_code == 200
    assert resp.json()["data"]["leave_balance"]["available_days"] == 24

    async with session_factory() as session:
        rows = (
            (await session.execute(select(LeaveBalance).where(col(LeaveBalance.employee_id) == employee_id)))
            .scalars()
            .all()
        )
    assert len(rows) == 1


# ---------------------------------------------------------------------------
# Adjustments
# ---------------------------------------------------------------------------


async def test_hr_grants_days(async_client: AsyncClient, staff: Staff) -> None:
    resp = await _adjust(async_client, staff.hr, staff.alice.id, 5)
    assert resp.status_code == 201, resp.json()
    body = resp.json()
    assert body["message"] == "Leave balance adjusted"

    entry = body["data"]["entry"]
    assert entry["entry_type"] == "ADJUSTMENT"
    assert entry["source_type"] == "ADMIN"
    assert entry["days"] == 5
    assert entry["metadata_json"] == {"reason": "Annual grant", "adjusted_by": str(staff.hr.id)}

    balance = body["data"]["leave_balance"]
    assert balance["current_balance"] == 29
    assert balance["available_days"] == 29


async def test_admin_deducts_days(async_client: AsyncClient, staff: Staff) -> None:
    resp = await _adjust(async_client, staff.admin, staff.alice.id, -4, reason="Correction")
    assert resp.status_code == 201
    balance = resp.json()["data"]["leave_balance"]
    assert balance["current_balance"] == 20
    assert balance["available_days"] == 20


async def test_deduction_beyond_available_rejected(async_client: AsyncClient, staff: Staff) -> None:
    resp = await _adjust(async_client, staff.hr, staff.alice.id, -25)
    assert resp.status_code == 400
    assert resp.json()["error"] == "InsufficientBalanceError"

    balance = await async_client.get(BALANCE_URL, headers=_headers(staff.alice))
    assert balance.json()["data"]["leave_balance"]["current_balance"] == 24


async def test_zero_adjustment_rejected(async_client: AsyncClient, staff: Staff) -> None:
    resp = await _adjust(async_client, staff.hr, staff.alice.id, 0)
    assert resp.status_code == 422


async def test_manager_cannot_adjust(async_client: AsyncClient, staff: Staff) -> None:
    resp = await _adjust(async_client, staff.manager, staff.alice.id, 5)
    assert resp.status_code == 403


async def test_employee_cannot_adjust_own_balance(async_client: AsyncClient, staff: Staff) -> None:
    resp = await _adjust(async_client, staff.alice, staff.alice.id, 5)
    assert resp.status_code == 403


async def test_adjust_unknown_employee(async_client: AsyncClient, staff: Staff) -> None:
    resp = await _adjust(async_client, staff.hr, uuid.uuid4(), 5)
    assert resp.status_code == 404


async def test_adjustment_writes_audit(
    async_client: AsyncClient,
    session_factory: async_sessionmaker[AsyncSession],
    staff: Staff,
) -> None:
    resp = await _adjust(async_client, staff.hr, staff.bob.id, 2)
    entry_id = uuid.UUID(resp.json()["data"]["entry"]["id"])

    async with session_factory() as session:
        audit = (await session.execute(select(AuditLog).where(col(AuditLog.entity_id) == entry_id))).scalar_one()
    assert audit.entity_type == "ADJUSTMENT"
    assert audit.action == "CREATE"
    assert audit.actor_id == staff.hr.id
    assert audit.before_json is not None
    assert audit.before_json["current_balance"] == 24
    assert audit.after_json is not None
    assert audit.after_json["current_balance"] == 26


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


async def test_ledger_lists_movements(async_client: AsyncClient, staff: Staff) -> None:
    await _adjust(async_client, staff.hr, staff.alice.id, 3)
    apply = await async_client.post(
        "/leave/apply",
        json={"start_date": "2024-06-10", "end_date": "2024-06-11", "reason": "trip"},
        headers=_headers(staff.alice),
    )
    assert apply.status_code == 201

    resp = await async_client.get(LEDGER_URL, headers=_headers(staff.alice))
    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 2
    assert body["num_pages"] == 1
    assert sorted((r["entry_type"], r["days"]) for r in body["records"]) == [("ADJUSTMENT", 3), ("RESERVE", 2)]


async def test_ledger_pagination(async_client: AsyncClient, staff: Staff) -> None:
    for _ in range(3):
        await _adjust(async_client, staff.hr, staff.bob.id, 1)

    resp = await async_client.get(
        LEDGER_URL, params={"employee_id": str(staff.bob.id), "page": 2, "page_size": 2}, headers=_headers(staff.hr)
    )
    body = resp.json()
    assert body["count"] == 3
    assert body["num_pages"] == 2
    assert body["current_page"] == 2
    assert len(body["records"]) == 1


async def test_employee_cannot_read_other_ledger(async_client: AsyncClient, staff: Staff) -> None:
    resp = await async_client.get(LEDGER_URL, params={"employee_id": str(staff.bob.id)}, headers=_headers(staff.alice))
    assert resp.status_code == 403
