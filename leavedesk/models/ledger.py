# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import CreatedAtMixin, UUIDBase


class LeaveLedgerEntry(UUIDBase, CreatedAtMixin, table=True):
    """Append-only ledger entry that records every balance movement."""

    __tablename__ = "leave_ledger_entry"
    __table_args__ = (
        sa.UniqueConstraint("source_type", "source_id", "entry_type", name="uq_leave_ledger_idempotency"),
        sa.CheckConstraint("days <> 0", name="ck_leave_ledger_days_non_zero"),
    )

    employee_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("employee.id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    entry_type: str = Field(max_length=50)
    days: int
    source_type: str = Field(max_length=50)
    source_id: str = Field(max_length=255)
    metadata_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
