# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, status

from leavedesk.api.deps import PrincipalDep
from leavedesk.db import SessionDep
from leavedesk.schemas.request import (
    DecisionPayload,
    LeaveRequestEnvelope,
    LeaveRequestListResponse,
    LeaveStatsResponse,
    ListLeaveRequestsPayload,
    SubmitLeavePayload,
)
from leavedesk.services import request as request_service

leave_router = APIRouter(prefix="/leave", tags=["leave"])

leave_requests_router = APIRouter(prefix="/leave-requests", tags=["leave"])


@leave_router.post("/apply", response_model=LeaveRequestEnvelope, status_code=status.HTTP_201_CREATED)
async def submit_request(
    payload: SubmitLeavePayload,
    session: SessionDep,
    principal: PrincipalDep,
) -> LeaveRequestEnvelope:
    """Apply for leave for yourself, or on behalf of an employee (managers, HR, admins)."""
    return await request_service.submit_request(session, principal, payload)


@leave_router.post("/approve-reject", response_model=LeaveRequestEnvelope)
async def decide_request(
    payload: DecisionPayload,
    session: SessionDep,
    principal: PrincipalDep,
) -> LeaveRequestEnvelope:
    """Approve or reject a pending leave request."""
    return await request_service.decide_request(session, principal, payload)


@leave_router.get("/stats", response_model=LeaveStatsResponse)
async def get_leave_stats(
    session: SessionDep,
    principal: PrincipalDep,
) -> LeaveStatsResponse:
    """Request counts per status visible to the caller."""
    return await request_service.get_leave_stats(session, principal)


@leave_requests_router.post("/list", response_model=LeaveRequestListResponse)
async def list_requests(
    payload: ListLeaveRequestsPayload,
    session: SessionDep,
    principal: PrincipalDep,
) -> LeaveRequestListResponse:
    """List leave requests with optional status, search and employee filters."""
    return await request_service.list_requests(session, principal, payload)


@leave_requests_router.get("/{request_id}", response_model=LeaveRequestEnvelope)
async def get_request(
    request_id: uuid.UUID,
    session: SessionDep,
    principal: PrincipalDep,
) -> LeaveRequestEnvelope:
    """Get a single leave request."""
    return await request_service.get_request(session, principal, request_id)
