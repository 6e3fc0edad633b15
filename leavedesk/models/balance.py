# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from leavedesk.models.base import now_utc


class LeaveBalance(SQLModel, table=True):
    """An employee's leave balance, updated transactionally with ledger writes."""

    __tablename__ = "leave_balance"
    __table_args__ = (
        sa.CheckConstraint("current_balance >= 0", name="ck_leave_balance_current_non_negative"),
        sa.CheckConstraint("used_days >= 0", name="ck_leave_balance_used_non_negative"),
        sa.CheckConstraint("pending_days >= 0", name="ck_leave_balance_pending_non_negative"),
        sa.CheckConstraint("available_days >= 0", name="ck_leave_balance_available_non_negative"),
        sa.CheckConstraint(
            "available_days = current_balance - used_days - pending_days",
            name="ck_leave_balance_identity",
        ),
    )

    employee_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("employee.id", ondelete="CASCADE"), primary_key=True),
    )
    current_balance: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    used_days: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    pending_days: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    available_days: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    updated_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now(), "onupdate": sa.func.now()},
    )
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
