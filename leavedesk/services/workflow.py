from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from leavedesk.exceptions import AlreadyDecidedError, AuthorizationError, ValidationError
from leavedesk.models.base import now_utc
from leavedesk.models.enums import Decision, LeaveStatus
from leavedesk.models.request import LeaveRequest
from leavedesk.services.authorization import Action, can_perform
from leavedesk.services.duration import days_between

if TYPE_CHECKING:
    import uuid
    from collections.abc import Callable
    from datetime import date, datetime

    from leavedesk.schemas.auth import Principal
    from leavedesk.services.ledger import LeaveBalanceLedger

logger = logging.getLogger(__name__)


class LeaveRequestStateMachine:
    """Lifecycle of a single leave request: PENDING -> APPROVED | REJECTED.

    Works on in-memory objects only. The caller owns persistence and must
    write the request and the ledger's balance in one transaction.
    """

    def __init__(self, clock: Callable[[], datetime] = now_utc) -> None:
        self._clock = clock

    def submit(
        self,
        ledger: LeaveBalanceLedger,
        employee_id: uuid.UUID,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> LeaveRequest:
        """Validate the command, reserve its days and build the PENDING request.

        Validation runs before the reservation and the request is built only
        after it, so a failure leaves both the ledger and the store untouched.
        """
        reason = (reason or "").strip()
        if not reason:
            msg = "Reason for leave must not be empty"
            raise ValidationError(msg)
        days = days_between(start_date, end_date)

        ledger.reserve(days)

        request = LeaveRequest(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=LeaveStatus.PENDING.value,
            applied_on=self._clock(),
        )
        logger.debug("Reserved %d day(s) for employee %s", days, employee_id)
        return request

    def decide(
        self,
        request: LeaveRequest,
        ledger: LeaveBalanceLedger,
        decider: Principal,
        decision: Decision,
        comments: str | None = None,
    ) -> LeaveRequest:
        """Approve or reject a pending request, settling its reserved days."""
        if not can_perform(decider, Action.DECIDE, request):
            msg = f"Role {decider.role} is not allowed to approve or reject leave requests"
            raise AuthorizationError(msg)
        # The gate already refuses decided requests; checked again because the
        # request may have been decided between the gate call and this point.
        if request.status != LeaveStatus.PENDING:
            msg = f"Leave request {request.id} has already been {request.status.lower()}"
            raise AlreadyDecidedError(msg)

        days = days_between(request.start_date, request.end_date)
        if decision is Decision.APPROVE:
            ledger.commit_used(days)
        else:
            ledger.release(days)

        comments = (comments or "").strip() or f"{decision.value} by {decider.name or decider.id}"
        request.status = LeaveStatus(decision.value).value
        request.decided_by = decider.id
        request.decided_on = self._clock()
        request.comments = comments
        return request
