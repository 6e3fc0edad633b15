# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from leavedesk.api.deps import PrincipalDep
from leavedesk.db import SessionDep
from leavedesk.schemas.balance import (
    AdjustmentEnvelope,
    CreateAdjustmentRequest,
    LeaveBalanceEnvelope,
    LedgerListResponse,
    LedgerQuery,
)
from leavedesk.schemas.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from leavedesk.services import balance as balance_service

balance_router = APIRouter(prefix="/leave", tags=["balances"])


@balance_router.get("/my-balance", response_model=LeaveBalanceEnvelope)
async def get_balance(
    session: SessionDep,
    principal: PrincipalDep,
    employee_id: uuid.UUID | None = Query(default=None),
) -> LeaveBalanceEnvelope:
    """Get the caller's leave balance, or another employee's for managers, HR and admins."""
    return await balance_service.get_employee_balance(session, principal, employee_id)


@balance_router.get("/ledger", response_model=LedgerListResponse)
async def get_ledger(
    session: SessionDep,
    principal: PrincipalDep,
    employee_id: uuid.UUID | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> LedgerListResponse:
    """Get paginated balance movements for an employee."""
    query = LedgerQuery(employee_id=employee_id, page=page, page_size=page_size)
    return await balance_service.get_employee_ledger(session, principal, query)


@balance_router.post("/adjustments", response_model=AdjustmentEnvelope, status_code=status.HTTP_201_CREATED)
async def create_adjustment(
    payload: CreateAdjustmentRequest,
    session: SessionDep,
    principal: PrincipalDep,
) -> AdjustmentEnvelope:
    """Grant or deduct leave days (HR and admins)."""
    return await balance_service.create_adjustment(session, principal, payload)
