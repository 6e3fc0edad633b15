# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Self

from pydantic import BaseModel, Field, model_validator

from leavedesk.models.enums import LedgerEntryType, LedgerSourceType
from leavedesk.schemas.pagination import PageParams

# ---------------------------------------------------------------------------
# Balance response schemas
# ---------------------------------------------------------------------------


class LeaveBalanceResponse(BaseModel):
    """An employee's leave balance in whole days."""

    employee_id: uuid.UUID
    current_balance: int
    used_days: int
    pending_days: int
    available_days: int
    updated_at: datetime | None


class LeaveBalanceData(BaseModel):
    leave_balance: LeaveBalanceResponse


class LeaveBalanceEnvelope(BaseModel):
    """Balance wrapped in the success envelope."""

    status: bool = True
    data: LeaveBalanceData


# ---------------------------------------------------------------------------
# Ledger response schemas
# ---------------------------------------------------------------------------


class LedgerEntryResponse(BaseModel):
    """A single ledger entry."""

    id: uuid.UUID
    employee_id: uuid.UUID
    entry_type: LedgerEntryType
    days: int
    source_type: LedgerSourceType
    source_id: str
    metadata_json: dict[str, Any] | None
    created_at: datetime


class LedgerListResponse(BaseModel):
    """Paginated ledger entries."""

    status: bool = True
    records: list[LedgerEntryResponse]
    count: int
    num_pages: int
    current_page: int


class LedgerQuery(PageParams):
    employee_id: uuid.UUID | None = None


# ---------------------------------------------------------------------------
# Adjustment schemas
# ---------------------------------------------------------------------------


class CreateAdjustmentRequest(BaseModel):
    """Request body for an HR/admin change to an employee's leave entitlement."""

    employee_id: uuid.UUID
    days: int = Field(description="Signed integer: positive to grant, negative to deduct")
    reason: str = Field(min_length=1, max_length=1000)

    @model_validator(mode="after")
    def _validate_days(self) -> Self:
        if self.days == 0:
            msg = "days must be non-zero"
            raise ValueError(msg)
        return self


class AdjustmentData(BaseModel):
    entry: LedgerEntryResponse
    leave_balance: LeaveBalanceResponse


class AdjustmentEnvelope(BaseModel):
    status: bool = True
    message: str | None = None
    data: AdjustmentData
