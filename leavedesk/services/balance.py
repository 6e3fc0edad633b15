from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leavedesk.config import get_settings
from leavedesk.exceptions import AuthorizationError, ConcurrencyError, NotFoundError
from leavedesk.models.balance import LeaveBalance
from leavedesk.models.base import now_utc
from leavedesk.models.enums import AuditAction, AuditEntityType, LedgerEntryType, LedgerSourceType
from leavedesk.models.ledger import LeaveLedgerEntry
from leavedesk.schemas.balance import (
    AdjustmentData,
    AdjustmentEnvelope,
    LeaveBalanceData,
    LeaveBalanceEnvelope,
    LeaveBalanceResponse,
    LedgerEntryResponse,
    LedgerListResponse,
)
from leavedesk.schemas.pagination import num_pages
from leavedesk.services.audit import audit_snapshot, write_audit_log
from leavedesk.services.authorization import Action, can_access_employee, ensure_can_perform
from leavedesk.services.employee import build_default_balance, get_employee_or_404
from leavedesk.services.ledger import LeaveBalanceLedger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import Principal
    from leavedesk.schemas.balance import CreateAdjustmentRequest, LedgerQuery

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def build_balance_response(balance: LeaveBalance) -> LeaveBalanceResponse:
    """Map a balance model to its response schema."""
    return LeaveBalanceResponse(
        employee_id=balance.employee_id,
        current_balance=balance.current_balance,
        used_days=balance.used_days,
        pending_days=balance.pending_days,
        available_days=balance.available_days,
        updated_at=balance.updated_at,
    )


def _build_ledger_entry_response(entry: LeaveLedgerEntry) -> LedgerEntryResponse:
    """Map a ledger entry model to its response schema."""
    return LedgerEntryResponse(
        id=entry.id,
        employee_id=entry.employee_id,
        entry_type=LedgerEntryType(entry.entry_type),
        days=entry.days,
        source_type=LedgerSourceType(entry.source_type),
        source_id=entry.source_id,
        metadata_json=entry.metadata_json,
        created_at=entry.created_at,
    )


def balance_write_attempts() -> range:
    """Attempt numbers for an optimistic balance write, starting at 1."""
    return range(1, get_settings().balance_retry_attempts + 1)


def balance_contention_error(employee_id: uuid.UUID) -> ConcurrencyError:
    """Error raised once every optimistic balance write attempt has lost a race."""
    msg = f"Leave balance for employee {employee_id} is being updated concurrently, please retry"
    return ConcurrencyError(msg)


async def get_balance_for_update(
    session: AsyncSession,
    employee_id: uuid.UUID,
    *,
    create: bool = True,
) -> LeaveBalance:
    """Read the balance row with a FOR UPDATE lock, provisioning the default if absent.

    The read always refreshes the identity map so a retry sees the latest
    committed version. When two callers provision the same balance at once
    the loser rolls back and reads the winner's row.
    """
    query = (
        select(LeaveBalance)
        .where(col(LeaveBalance.employee_id) == employee_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    balance = (await session.execute(query)).scalar_one_or_none()
    if balance is not None:
        return balance

    if not create:
        msg = f"No leave balance recorded for employee {employee_id}"
        raise NotFoundError(msg)

    balance = build_default_balance(employee_id)
    session.add(balance)
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        balance = (await session.execute(query)).scalar_one_or_none()
        if balance is None:
            raise
    return balance


async def write_balance(session: AsyncSession, balance: LeaveBalance, ledger: LeaveBalanceLedger) -> bool:
    """Compare-and-swap the ledger's quantities onto ``balance``.

    The update only applies if the row still carries the version that was
    read. Returns False when a concurrent writer got there first; the caller
    must then roll back and retry under a fresh read.
    """
    result = await session.execute(
        update(LeaveBalance)
        .where(
            col(LeaveBalance.employee_id) == balance.employee_id,
            col(LeaveBalance.version) == balance.version,
        )
        .values(**ledger.as_values(), version=balance.version + 1, updated_at=now_utc())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def add_ledger_entries(
    session: AsyncSession,
    ledger: LeaveBalanceLedger,
    employee_id: uuid.UUID,
    source_type: LedgerSourceType,
    source_id: str,
    metadata: dict[str, Any] | None = None,
) -> list[LeaveLedgerEntry]:
    """Stage one ledger entry per movement recorded on ``ledger``."""
    entries = [
        LeaveLedgerEntry(
            employee_id=employee_id,
            entry_type=entry_type.value,
            days=days,
            source_type=source_type.value,
            source_id=source_id,
            metadata_json=metadata,
        )
        for entry_type, days in ledger.movements
    ]
    session.add_all(entries)
    return entries


def _resolve_target(principal: Principal, employee_id: uuid.UUID | None) -> uuid.UUID:
    target = employee_id or principal.id
    if not can_access_employee(principal, target):
        msg = "Employees may only view their own leave balance"
        raise AuthorizationError(msg)
    return target


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_employee_balance(
    session: AsyncSession,
    principal: Principal,
    employee_id: uuid.UUID | None = None,
) -> LeaveBalanceEnvelope:
    """Get the leave balance of ``employee_id``, defaulting to the caller."""
    target = _resolve_target(principal, employee_id)
    await get_employee_or_404(session, target)

    result = await session.execute(select(LeaveBalance).where(col(LeaveBalance.employee_id) == target))
    balance = result.scalar_one_or_none()
    if balance is None:
        balance = await get_balance_for_update(session, target)
        await session.commit()
        await session.refresh(balance)
        logger.info("Provisioned default leave balance for employee %s", target)

    return LeaveBalanceEnvelope(data=LeaveBalanceData(leave_balance=build_balance_response(balance)))


async def get_employee_ledger(
    session: AsyncSession,
    principal: Principal,
    query: LedgerQuery,
) -> LedgerListResponse:
    """Get paginated ledger entries for an employee, newest first."""
    target = _resolve_target(principal, query.employee_id)
    base_filter = [col(LeaveLedgerEntry.employee_id) == target]

    count_result = await session.execute(select(func.count()).select_from(LeaveLedgerEntry).where(*base_filter))
    total = count_result.scalar_one()

    entries_result = await session.execute(
        select(LeaveLedgerEntry)
        .where(*base_filter)
        .order_by(col(LeaveLedgerEntry.created_at).desc(), col(LeaveLedgerEntry.id).desc())
        .offset(query.offset)
        .limit(query.page_size)
    )
    entries = list(entries_result.scalars().all())

    return LedgerListResponse(
        records=[_build_ledger_entry_response(e) for e in entries],
        count=total,
        num_pages=num_pages(total, query.page_size),
        current_page=query.page,
    )


# ---------------------------------------------------------------------------
# Write path: admin adjustments
# ---------------------------------------------------------------------------


async def create_adjustment(
    session: AsyncSession,
    principal: Principal,
    payload: CreateAdjustmentRequest,
) -> AdjustmentEnvelope:
    """Grant or deduct entitlement days.

    Flow, repeated while the optimistic balance write loses a race:
    1. Lock (or provision) the balance
    2. Apply the adjustment on a ledger copy
    3. Compare-and-swap the balance
    4. Insert the ADJUSTMENT ledger entry and the audit log
    5. Commit
    """
    ensure_can_perform(principal, Action.ADJUST_BALANCE)
    await get_employee_or_404(session, payload.employee_id)

    for attempt in balance_write_attempts():
        balance = await get_balance_for_update(session, payload.employee_id)
        before_dict = audit_snapshot(balance, exclude={"updated_at"})

        ledger = LeaveBalanceLedger.from_balance(balance)
        ledger.adjust(payload.days)

        if not await write_balance(session, balance, ledger):
            await session.rollback()
            logger.warning(
                "Balance for employee %s changed during adjustment (attempt %d)", payload.employee_id, attempt
            )
            continue

        (entry,) = add_ledger_entries(
            session,
            ledger,
            payload.employee_id,
            LedgerSourceType.ADMIN,
            str(uuid.uuid4()),
            metadata={"reason": payload.reason, "adjusted_by": str(principal.id)},
        )
        await session.flush()

        await write_audit_log(
            session,
            actor_id=principal.id,
            entity_type=AuditEntityType.ADJUSTMENT,
            entity_id=entry.id,
            action=AuditAction.CREATE,
            before_json=before_dict,
            after_json={**audit_snapshot(entry), **ledger.as_values()},
        )

        await session.commit()
        await session.refresh(balance)
        await session.refresh(entry)
        logger.info("Adjusted leave balance of employee %s by %+d day(s)", payload.employee_id, payload.days)
        return AdjustmentEnvelope(
            message="Leave balance adjusted",
            data=AdjustmentData(
                entry=_build_ledger_entry_response(entry),
                leave_balance=build_balance_response(balance),
            ),
        )

    raise balance_contention_error(payload.employee_id)
