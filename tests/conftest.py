from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, NamedTuple

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from leavedesk.db import get_session
from leavedesk.main import app
from leavedesk.models import SQLModel
from leavedesk.models.balance import LeaveBalance
from leavedesk.models.employee import Employee
from leavedesk.models.enums import Role
from leavedesk.schemas.auth import Principal

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncEngine


class Staff(NamedTuple):
    """One seeded employee per role, plus a second plain employee."""

    admin: Principal
    hr: Principal
    manager: Principal
    alice: Principal
    bob: Principal


_STAFF = [
    ("admin", "Ada Admin", "ada@example.com", Role.ADMIN),
    ("hr", "Hana Reyes", "hana@example.com", Role.HR),
    ("manager", "Marcus Lee", "marcus@example.com", Role.MANAGER),
    ("alice", "Alice Johnson", "alice@example.com", Role.EMPLOYEE),
    ("bob", "Bob Smith", "bob@example.com", Role.EMPLOYEE),
]


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """In-memory SQLite engine with a fresh schema per test.

    StaticPool keeps every session on the single in-memory connection.
    """
    _engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Short-lived session for calling services directly and inspecting rows."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with every request getting its own session on the test engine."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def staff(session_factory: async_sessionmaker[AsyncSession]) -> Staff:
    """Seed one employee per role, each with the default 24-day balance."""
    principals: dict[str, Principal] = {}
    async with session_factory() as session:
        for key, name, email, role in _STAFF:
            employee_id = uuid.uuid4()
            session.add(Employee(id=employee_id, name=name, email=email, role=role))
            principals[key] = Principal(id=employee_id, role=role, name=name)
        await session.flush()
        for principal in principals.values():
            session.add(
                LeaveBalance(
                    employee_id=principal.id,
                    current_balance=24,
                    used_days=0,
                    pending_days=0,
                    available_days=24,
                )
            )
        await session.commit()
    return Staff(**principals)
