# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Response, status

from leavedesk.api.deps import PrincipalDep
from leavedesk.db import SessionDep
from leavedesk.schemas.employee import EmployeeEnvelope, EmployeeListResponse, UpsertEmployeeRequest
from leavedesk.services import employee as employee_service

employees_router = APIRouter(prefix="/employees", tags=["employees"])


@employees_router.get("", response_model=EmployeeListResponse)
async def list_employees(
    session: SessionDep,
    principal: PrincipalDep,
) -> EmployeeListResponse:
    """List employees (managers, HR and admins)."""
    return await employee_service.list_employees(session, principal)


@employees_router.get("/{employee_id}", response_model=EmployeeEnvelope)
async def get_employee(
    employee_id: uuid.UUID,
    session: SessionDep,
    principal: PrincipalDep,
) -> EmployeeEnvelope:
    """Get a single employee."""
    return EmployeeEnvelope(data=await employee_service.get_employee(session, principal, employee_id))


@employees_router.put("/{employee_id}", response_model=EmployeeEnvelope)
async def upsert_employee(
    employee_id: uuid.UUID,
    payload: UpsertEmployeeRequest,
    session: SessionDep,
    principal: PrincipalDep,
    response: Response,
) -> EmployeeEnvelope:
    """Provision or update an employee (HR and admins). New employees get the default leave balance."""
    employee, created = await employee_service.upsert_employee(session, principal, employee_id, payload)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return EmployeeEnvelope(message="Employee created" if created else "Employee updated", data=employee)
