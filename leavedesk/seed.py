"""Seed script for development data.

Run with:  python -m leavedesk.seed
Creates the tables if needed, an admin, one employee per role and a couple of
leave requests in different states. Safe to run more than once.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import date

from sqlalchemy import select
from sqlmodel import col

from leavedesk.db import create_tables, dispose_engine, get_session_factory
from leavedesk.models.employee import Employee
from leavedesk.models.enums import Decision, Role
from leavedesk.models.request import LeaveRequest
from leavedesk.schemas.auth import Principal
from leavedesk.schemas.employee import UpsertEmployeeRequest
from leavedesk.schemas.request import DecisionPayload, SubmitLeavePayload
from leavedesk.services import employee as employee_service
from leavedesk.services import request as request_service
from leavedesk.services.employee import build_default_balance

logger = logging.getLogger(__name__)

# Well-known employee UUIDs
ADMIN_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
HR_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")
MANAGER_ID = uuid.UUID("00000000-0000-0000-0000-000000000003")
ALICE_ID = uuid.UUID("00000000-0000-0000-0000-000000000004")
BOB_ID = uuid.UUID("00000000-0000-0000-0000-000000000005")

EMPLOYEES = [
    (
        HR_ID,
        UpsertEmployeeRequest(
            name="Hana Reyes",
            email="hana.reyes@example.com",
            role=Role.HR,
            designation="HR Generalist",
            department="People",
        ),
    ),
    (
        MANAGER_ID,
        UpsertEmployeeRequest(
            name="Marcus Lee",
            email="marcus.lee@example.com",
            role=Role.MANAGER,
            designation="Engineering Manager",
            department="Engineering",
        ),
    ),
    (
        ALICE_ID,
        UpsertEmployeeRequest(
            name="Alice Johnson",
            email="alice.johnson@example.com",
            designation="Software Engineer",
            department="Engineering",
        ),
    ),
    (
        BOB_ID,
        UpsertEmployeeRequest(
            name="Bob Smith",
            email="bob.smith@example.com",
            designation="QA Engineer",
            department="Engineering",
        ),
    ),
]


async def _ensure_admin() -> Principal:
    """Create the bootstrap admin directly; every other record goes through the services."""
    async with get_session_factory()() as session:
        result = await session.execute(select(Employee).where(col(Employee.id) == ADMIN_ID))
        if result.scalar_one_or_none() is None:
            session.add(Employee(id=ADMIN_ID, name="Ada Admin", email="admin@example.com", role=Role.ADMIN))
            await session.flush()
            session.add(build_default_balance(ADMIN_ID))
            await session.commit()
            logger.info("Created bootstrap admin %s", ADMIN_ID)
    return Principal(id=ADMIN_ID, role=Role.ADMIN, name="Ada Admin")


async def _seed_requests(admin: Principal) -> None:
    async with get_session_factory()() as session:
        result = await session.execute(select(LeaveRequest).limit(1))
        if result.scalar_one_or_none() is not None:
            logger.info("Leave requests already present, skipping")
            return

        alice = Principal(id=ALICE_ID, role=Role.EMPLOYEE, name="Alice Johnson")
        manager = Principal(id=MANAGER_ID, role=Role.MANAGER, name="Marcus Lee")

        approved = await request_service.submit_request(
            session,
            alice,
            SubmitLeavePayload(start_date=date(2024, 6, 10), end_date=date(2024, 6, 12), reason="Family trip"),
        )
        await request_service.decide_request(
            session, manager, DecisionPayload(request_id=approved.data.id, action=Decision.APPROVE)
        )
        await request_service.submit_request(
            session,
            alice,
            SubmitLeavePayload(start_date=date(2024, 7, 1), end_date=date(2024, 7, 1), reason="Dentist"),
        )
        await request_service.submit_request(
            session,
            admin,
            SubmitLeavePayload(
                employee_id=BOB_ID, start_date=date(2024, 8, 5), end_date=date(2024, 8, 9), reason="Conference"
            ),
        )
    logger.info("Seeded sample leave requests")


async def main() -> None:
    await create_tables()

    admin = await _ensure_admin()
    for employee_id, payload in EMPLOYEES:
        async with get_session_factory()() as session:
            _, created = await employee_service.upsert_employee(session, admin, employee_id, payload)
        logger.info("%s %s (%s)", "Created" if created else "Updated", payload.name, payload.role)

    await _seed_requests(admin)
    await dispose_engine()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    asyncio.run(main())
