# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import UUIDBase, utc_timestamp
from leavedesk.models.enums import LeaveStatus


class LeaveRequest(UUIDBase, table=True):
    """An employee's leave request with its approval workflow state.

    Rows are never deleted; the decided columns are filled exactly once.
    """

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.Index("ix_leave_request_employee_status", "employee_id", "status"),
        sa.CheckConstraint("start_date <= end_date", name="ck_leave_request_date_order"),
        sa.CheckConstraint(
            "(status = 'PENDING') = (decided_on IS NULL)"
            " AND (status = 'PENDING') = (decided_by IS NULL)"
            " AND (status = 'PENDING') = (comments IS NULL)",
            name="ck_leave_request_decision_recorded",
        ),
    )

    employee_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("employee.id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    start_date: date
    end_date: date
    reason: str = Field(max_length=2000)
    status: str = Field(
        default=LeaveStatus.PENDING, max_length=50, index=True, sa_column_kwargs={"server_default": "PENDING"}
    )
    applied_on: datetime = utc_timestamp(index=True, server_default=False)
    decided_by: uuid.UUID | None = Field(
        default=None,
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("employee.id"), nullable=True),
    )
    decided_on: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    comments: str | None = Field(default=None, max_length=1000)
