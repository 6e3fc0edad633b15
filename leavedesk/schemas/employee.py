# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from leavedesk.models.enums import Role


class UpsertEmployeeRequest(BaseModel):
    """Request body for provisioning or updating an employee."""

    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    role: Role = Role.EMPLOYEE
    designation: str | None = Field(default=None, max_length=255)
    department: str | None = Field(default=None, max_length=255)


class EmployeeBrief(BaseModel):
    """Compact employee shape embedded in leave request responses."""

    id: uuid.UUID
    name: str
    email: str
    role: Role


class EmployeeResponse(BaseModel):
    """Response schema for an employee."""

    id: uuid.UUID
    name: str
    email: str
    role: Role
    designation: str | None
    department: str | None
    created_at: datetime


class EmployeeEnvelope(BaseModel):
    """Single employee wrapped in the success envelope."""

    status: bool = True
    message: str | None = None
    data: EmployeeResponse


class EmployeeListResponse(BaseModel):
    """List of employees."""

    status: bool = True
    records: list[EmployeeResponse]
    count: int
