from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leavedesk.config import get_settings
from leavedesk.exceptions import AppError, AuthorizationError, NotFoundError
from leavedesk.models.balance import LeaveBalance
from leavedesk.models.employee import Employee
from leavedesk.models.enums import AuditAction, AuditEntityType, Role
from leavedesk.schemas.auth import Principal
from leavedesk.schemas.employee import EmployeeBrief, EmployeeListResponse, EmployeeResponse
from leavedesk.services.audit import audit_snapshot, write_audit_log
from leavedesk.services.authorization import Action, ensure_can_perform

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.employee import UpsertEmployeeRequest

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def build_employee_brief(employee: Employee) -> EmployeeBrief:
    return EmployeeBrief(id=employee.id, name=employee.name, email=employee.email, role=Role(employee.role))


def _build_employee_response(employee: Employee) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        name=employee.name,
        email=employee.email,
        role=Role(employee.role),
        designation=employee.designation,
        department=employee.department,
        created_at=employee.created_at,
    )


def build_default_balance(employee_id: uuid.UUID) -> LeaveBalance:
    """Opening balance granted to every employee."""
    days = get_settings().default_leave_days
    return LeaveBalance(
        employee_id=employee_id,
        current_balance=days,
        used_days=0,
        pending_days=0,
        available_days=days,
    )


async def get_employee_or_404(session: AsyncSession, employee_id: uuid.UUID) -> Employee:
    """Fetch an employee by ID. Raises NotFoundError if absent."""
    result = await session.execute(select(Employee).where(col(Employee.id) == employee_id))
    employee = result.scalar_one_or_none()
    if employee is None:
        msg = f"Employee {employee_id} not found"
        raise NotFoundError(msg)
    return employee


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def resolve_principal(session: AsyncSession, user_id: uuid.UUID) -> Principal:
    """Resolve the caller's identity and role from the employee directory."""
    result = await session.execute(select(Employee).where(col(Employee.id) == user_id))
    employee = result.scalar_one_or_none()
    if employee is None:
        msg = "Unknown user"
        raise AuthorizationError(msg, status_code=401)
    return Principal(id=employee.id, role=Role(employee.role), name=employee.name)


async def get_employee(session: AsyncSession, principal: Principal, employee_id: uuid.UUID) -> EmployeeResponse:
    """Get a single employee. Employees may only read their own record."""
    if not principal.is_privileged and principal.id != employee_id:
        msg = "Employees may only view their own record"
        raise AuthorizationError(msg)
    employee = await get_employee_or_404(session, employee_id)
    return _build_employee_response(employee)


async def list_employees(session: AsyncSession, principal: Principal) -> EmployeeListResponse:
    """List every employee, ordered by name. Used to apply for leave on someone's behalf."""
    ensure_can_perform(principal, Action.SUBMIT_FOR_OTHER)
    result = await session.execute(select(Employee).order_by(col(Employee.name), col(Employee.id)))
    employees = list(result.scalars().all())
    return EmployeeListResponse(records=[_build_employee_response(e) for e in employees], count=len(employees))


async def upsert_employee(
    session: AsyncSession,
    principal: Principal,
    employee_id: uuid.UUID,
    payload: UpsertEmployeeRequest,
) -> tuple[EmployeeResponse, bool]:
    """Provision or update an employee. New employees get the default leave balance.

    Returns the employee and whether it was created.
    """
    ensure_can_perform(principal, Action.MANAGE_EMPLOYEES)

    result = await session.execute(select(Employee).where(col(Employee.id) == employee_id))
    employee = result.scalar_one_or_none()
    created = employee is None
    before_dict = None if created else audit_snapshot(employee)

    if employee is None:
        employee = Employee(id=employee_id, **payload.model_dump())
        session.add(employee)
    else:
        for field, value in payload.model_dump().items():
            setattr(employee, field, value)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        msg = f"An employee with email {payload.email} already exists"
        raise AppError(msg, status_code=409) from None

    if created:
        balance_result = await session.execute(
            select(LeaveBalance).where(col(LeaveBalance.employee_id) == employee_id)
        )
        if balance_result.scalar_one_or_none() is None:
            session.add(build_default_balance(employee_id))

    await write_audit_log(
        session,
        actor_id=principal.id,
        entity_type=AuditEntityType.EMPLOYEE,
        entity_id=employee_id,
        action=AuditAction.CREATE if created else AuditAction.UPDATE,
        before_json=before_dict,
        after_json=audit_snapshot(employee),
    )

    await session.commit()
    await session.refresh(employee)
    logger.info("Employee %s %s by %s", employee_id, "created" if created else "updated", principal.id)
    return _build_employee_response(employee), created
