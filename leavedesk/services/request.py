from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import aliased
from sqlmodel import col

from leavedesk.exceptions import AlreadyDecidedError, NotFoundError
from leavedesk.models.employee import Employee
from leavedesk.models.enums import AuditAction, AuditEntityType, Decision, LedgerSourceType, LeaveStatus
from leavedesk.models.request import LeaveRequest
from leavedesk.schemas.pagination import num_pages
from leavedesk.schemas.request import (
    LeaveRequestEnvelope,
    LeaveRequestListResponse,
    LeaveRequestResponse,
    LeaveStats,
    LeaveStatsResponse,
)
from leavedesk.services.audit import audit_snapshot, write_audit_log
from leavedesk.services.authorization import Action, ensure_can_perform, list_scope
from leavedesk.services.balance import (
    add_ledger_entries,
    balance_contention_error,
    balance_write_attempts,
    get_balance_for_update,
    write_balance,
)
from leavedesk.services.duration import days_between
from leavedesk.services.employee import build_employee_brief, get_employee_or_404
from leavedesk.services.ledger import LeaveBalanceLedger
from leavedesk.services.workflow import LeaveRequestStateMachine

if TYPE_CHECKING:
    import uuid

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import Principal
    from leavedesk.schemas.request import DecisionPayload, ListLeaveRequestsPayload, SubmitLeavePayload

logger = logging.getLogger(__name__)

_DECIDER = aliased(Employee, name="decider")

_state_machine = LeaveRequestStateMachine()


def get_state_machine() -> LeaveRequestStateMachine:
    """Return the state machine used by the service."""
    return _state_machine


def set_state_machine(state_machine: LeaveRequestStateMachine) -> None:
    """Override the state machine (for testing with a fixed clock)."""
    global _state_machine
    _state_machine = state_machine


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_request_response(
    request: LeaveRequest,
    employee: Employee,
    decider: Employee | None,
) -> LeaveRequestResponse:
    """Map a request and its related employees to the response schema."""
    return LeaveRequestResponse(
        id=request.id,
        employee=build_employee_brief(employee),
        start_date=request.start_date,
        end_date=request.end_date,
        days=days_between(request.start_date, request.end_date),
        reason=request.reason,
        status=LeaveStatus(request.status),
        applied_on=request.applied_on,
        decided_by=build_employee_brief(decider) if decider is not None else None,
        decided_on=request.decided_on,
        comments=request.comments,
    )


def _request_query() -> Select[tuple[LeaveRequest, Employee, Employee]]:
    """Requests joined with their employee and (optional) decider."""
    return (
        select(LeaveRequest, Employee, _DECIDER)
        .join(Employee, col(LeaveRequest.employee_id) == col(Employee.id))
        .outerjoin(_DECIDER, col(LeaveRequest.decided_by) == _DECIDER.id)
    )


async def _load_request_response(session: AsyncSession, request_id: uuid.UUID) -> LeaveRequestResponse:
    result = await session.execute(
        _request_query().where(col(LeaveRequest.id) == request_id).execution_options(populate_existing=True)
    )
    row = result.one_or_none()
    if row is None:
        msg = f"Leave request {request_id} not found"
        raise NotFoundError(msg)
    return _build_request_response(*row)


async def _get_request_or_404(session: AsyncSession, request_id: uuid.UUID) -> LeaveRequest:
    """Fetch a request by ID, bypassing any stale copy in the identity map."""
    result = await session.execute(
        select(LeaveRequest)
        .where(col(LeaveRequest.id) == request_id)
        .execution_options(populate_existing=True)
    )
    request = result.scalar_one_or_none()
    if request is None:
        msg = f"Leave request {request_id} not found"
        raise NotFoundError(msg)
    return request


def _resolve_submit_target(principal: Principal, employee_id: uuid.UUID | None) -> uuid.UUID:
    """Employee the leave is for.

    Managers, HR and admins may name another employee; anyone else always
    applies for themselves, whatever employee_id they send.
    """
    if principal.is_privileged and employee_id is not None and employee_id != principal.id:
        ensure_can_perform(principal, Action.SUBMIT_FOR_OTHER)
        return employee_id
    ensure_can_perform(principal, Action.SUBMIT_SELF)
    return principal.id


async def _ensure_still_pending(session: AsyncSession, request_id: uuid.UUID) -> None:
    """Re-read the stored status once the balance lock is held.

    A decision that committed while this one waited on the lock is visible
    here, before any days are settled against the balance it left behind.
    """
    result = await session.execute(
        select(col(LeaveRequest.status)).where(col(LeaveRequest.id) == request_id).with_for_update()
    )
    if result.scalar_one() != LeaveStatus.PENDING:
        await session.rollback()
        msg = f"Leave request {request_id} has already been decided"
        raise AlreadyDecidedError(msg)


async def _mark_decided(session: AsyncSession, request: LeaveRequest) -> bool:
    """Persist a decision only if the stored request is still PENDING.

    Of two concurrent decisions on the same request exactly one sees a
    matching row; the other gets False.
    """
    result = await session.execute(
        update(LeaveRequest)
        .where(
            col(LeaveRequest.id) == request.id,
            col(LeaveRequest.status) == LeaveStatus.PENDING.value,
        )
        .values(
            status=request.status,
            decided_by=request.decided_by,
            decided_on=request.decided_on,
            comments=request.comments,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def submit_request(
    session: AsyncSession,
    principal: Principal,
    payload: SubmitLeavePayload,
) -> LeaveRequestEnvelope:
    """Apply for leave, reserving the requested days.

    Flow:
    1. Resolve the effective employee and authorize
    2. Lock (or provision) the employee's balance
    3. Validate and reserve through the state machine
    4. Compare-and-swap the balance; on a lost race roll back and go to 2
    5. Insert the PENDING request and its RESERVE ledger entry
    6. Write audit log
    7. Commit
    """
    employee_id = _resolve_submit_target(principal, payload.employee_id)
    await get_employee_or_404(session, employee_id)

    for attempt in balance_write_attempts():
        balance = await get_balance_for_update(session, employee_id)
        ledger = LeaveBalanceLedger.from_balance(balance)
        leave_request = _state_machine.submit(
            ledger, employee_id, payload.start_date, payload.end_date, payload.reason
        )

        if not await write_balance(session, balance, ledger):
            await session.rollback()
            logger.warning("Balance for employee %s changed during submit (attempt %d)", employee_id, attempt)
            continue

        session.add(leave_request)
        await session.flush()
        add_ledger_entries(session, ledger, employee_id, LedgerSourceType.REQUEST, str(leave_request.id))

        await write_audit_log(
            session,
            actor_id=principal.id,
            entity_type=AuditEntityType.REQUEST,
            entity_id=leave_request.id,
            action=AuditAction.SUBMIT,
            after_json=audit_snapshot(leave_request),
        )

        await session.commit()
        logger.info(
            "Leave request %s submitted for employee %s by %s (%s to %s)",
            leave_request.id,
            employee_id,
            principal.id,
            payload.start_date,
            payload.end_date,
        )
        return LeaveRequestEnvelope(
            message="Leave request submitted successfully",
            data=await _load_request_response(session, leave_request.id),
        )

    raise balance_contention_error(employee_id)


async def decide_request(
    session: AsyncSession,
    principal: Principal,
    payload: DecisionPayload,
) -> LeaveRequestEnvelope:
    """Approve or reject a pending request, settling its reserved days.

    The request is decided on a detached copy and written with a conditional
    update keyed on PENDING, together with an optimistic balance write, in a
    single commit. Its status is read again under the balance lock, so a
    decision that won the race is reported as such rather than as a failed
    settlement.
    """
    for attempt in balance_write_attempts():
        leave_request = await _get_request_or_404(session, payload.request_id)
        session.expunge(leave_request)
        ensure_can_perform(principal, Action.DECIDE, leave_request)
        before_dict = audit_snapshot(leave_request)

        balance = await get_balance_for_update(session, leave_request.employee_id, create=False)
        await _ensure_still_pending(session, leave_request.id)
        ledger = LeaveBalanceLedger.from_balance(balance)
        _state_machine.decide(leave_request, ledger, principal, payload.action, payload.comments)

        if not await _mark_decided(session, leave_request):
            await session.rollback()
            msg = f"Leave request {leave_request.id} has already been decided"
            raise AlreadyDecidedError(msg)

        if not await write_balance(session, balance, ledger):
            await session.rollback()
            logger.warning(
                "Balance for employee %s changed during decision on %s (attempt %d)",
                leave_request.employee_id,
                leave_request.id,
                attempt,
            )
            continue

        add_ledger_entries(
            session,
            ledger,
            leave_request.employee_id,
            LedgerSourceType.REQUEST,
            str(leave_request.id),
            metadata={"decided_by": str(principal.id)},
        )

        await write_audit_log(
            session,
            actor_id=principal.id,
            entity_type=AuditEntityType.REQUEST,
            entity_id=leave_request.id,
            action=AuditAction.APPROVE if payload.action is Decision.APPROVE else AuditAction.REJECT,
            before_json=before_dict,
            after_json=audit_snapshot(leave_request),
        )

        await session.commit()
        verb = "approved" if payload.action is Decision.APPROVE else "rejected"
        logger.info("Leave request %s %s by %s", leave_request.id, verb, principal.id)
        return LeaveRequestEnvelope(
            message=f"Leave request {verb} successfully",
            data=await _load_request_response(session, leave_request.id),
        )

    raise balance_contention_error(payload.request_id)


async def get_request(
    session: AsyncSession,
    principal: Principal,
    request_id: uuid.UUID,
) -> LeaveRequestEnvelope:
    """Get a single leave request."""
    leave_request = await _get_request_or_404(session, request_id)
    ensure_can_perform(principal, Action.VIEW, leave_request)
    return LeaveRequestEnvelope(data=await _load_request_response(session, request_id))


async def list_requests(
    session: AsyncSession,
    principal: Principal,
    payload: ListLeaveRequestsPayload,
) -> LeaveRequestListResponse:
    """List leave requests with optional filters, newest application first.

    Employees only ever see their own requests, whatever employee_id they send.
    """
    ensure_can_perform(principal, Action.LIST)

    scope = list_scope(principal)
    employee_id = scope if scope is not None else payload.employee_id

    filters = []
    if employee_id is not None:
        filters.append(col(LeaveRequest.employee_id) == employee_id)
    if payload.status is not None:
        filters.append(col(LeaveRequest.status) == payload.status.value)
    search = (payload.search or "").strip()
    if search:
        pattern = f"%{_escape_like(search)}%"
        filters.append(
            or_(
                col(Employee.name).ilike(pattern, escape="\\"),
                col(Employee.email).ilike(pattern, escape="\\"),
                col(LeaveRequest.reason).ilike(pattern, escape="\\"),
            )
        )

    count_result = await session.execute(
        select(func.count())
        .select_from(LeaveRequest)
        .join(Employee, col(LeaveRequest.employee_id) == col(Employee.id))
        .where(*filters)
    )
    total = count_result.scalar_one()

    result = await session.execute(
        _request_query()
        .where(*filters)
        .order_by(col(LeaveRequest.applied_on).desc(), col(LeaveRequest.id).desc())
        .offset(payload.offset)
        .limit(payload.page_size)
    )
    records = [_build_request_response(*row) for row in result.all()]

    return LeaveRequestListResponse(
        records=records,
        count=total,
        num_pages=num_pages(total, payload.page_size),
        current_page=payload.page,
    )


async def get_leave_stats(session: AsyncSession, principal: Principal) -> LeaveStatsResponse:
    """Count requests per status within the caller's list scope."""
    ensure_can_perform(principal, Action.LIST)

    query = select(col(LeaveRequest.status), func.count()).group_by(col(LeaveRequest.status))
    scope = list_scope(principal)
    if scope is not None:
        query = query.where(col(LeaveRequest.employee_id) == scope)

    result = await session.execute(query)
    counts = {status: count for status, count in result.all()}

    pending = counts.get(LeaveStatus.PENDING.value, 0)
    approved = counts.get(LeaveStatus.APPROVED.value, 0)
    rejected = counts.get(LeaveStatus.REJECTED.value, 0)
    return LeaveStatsResponse(
        data=LeaveStats(total=pending + approved + rejected, pending=pending, approved=approved, rejected=rejected)
    )
