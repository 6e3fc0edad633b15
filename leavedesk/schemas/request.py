# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field

from leavedesk.models.enums import Decision, LeaveStatus
from leavedesk.schemas.employee import EmployeeBrief
from leavedesk.schemas.pagination import PageParams

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitLeavePayload(BaseModel):
    """Request body for applying for leave, for oneself or on behalf of another employee.

    Date order and a blank reason are checked by the workflow, not here, so
    that every transport gets the same errors.
    """

    employee_id: uuid.UUID | None = None
    start_date: date
    end_date: date
    reason: str = Field(max_length=2000)


class DecisionPayload(BaseModel):
    """Request body for approving or rejecting a pending request."""

    request_id: uuid.UUID
    action: Decision
    comments: str | None = Field(default=None, max_length=1000)


class ListLeaveRequestsPayload(PageParams):
    """Filters and page selection for listing leave requests."""

    status: LeaveStatus | None = None
    search: str | None = Field(default=None, max_length=255)
    employee_id: uuid.UUID | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveRequestResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    employee: EmployeeBrief
    start_date: date
    end_date: date
    days: int
    reason: str
    status: LeaveStatus
    applied_on: datetime
    decided_by: EmployeeBrief | None
    decided_on: datetime | None
    comments: str | None


class LeaveRequestEnvelope(BaseModel):
    """Tagged success envelope around a single leave request."""

    status: bool = True
    message: str | None = None
    data: LeaveRequestResponse


class LeaveRequestListResponse(BaseModel):
    """One page of leave requests."""

    status: bool = True
    records: list[LeaveRequestResponse]
    count: int
    num_pages: int
    current_page: int


class LeaveStats(BaseModel):
    """Request counts per status within the caller's visibility."""

    total: int
    pending: int
    approved: int
    rejected: int


class LeaveStatsResponse(BaseModel):
    status: bool = True
    data: LeaveStats
