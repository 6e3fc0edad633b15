"""Tests for the leave request state machine, independent of persistence."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime

import pytest

from leavedesk.exceptions import (
    AlreadyDecidedError,
    AuthorizationError,
    InsufficientBalanceError,
    InvalidRangeError,
    ValidationError,
)
from leavedesk.models.enums import Decision, LeaveStatus, LedgerEntryType, Role
from leavedesk.models.request import LeaveRequest
from leavedesk.schemas.auth import Principal
from leavedesk.services.ledger import LeaveBalanceLedger
from leavedesk.services.workflow import LeaveRequestStateMachine

NOW = datetime(2024, 5, 1, 9, 30, tzinfo=UTC)
EMPLOYEE = Principal(id=uuid.uuid4(), role=Role.EMPLOYEE, name="Erin Park")
MANAGER = Principal(id=uuid.uuid4(), role=Role.MANAGER, name="Mona Diaz")


@pytest.fixture
def machine() -> LeaveRequestStateMachine:
    return LeaveRequestStateMachine(clock=lambda: NOW)


def _submit(machine: LeaveRequestStateMachine, ledger: LeaveBalanceLedger, days: int = 3) -> LeaveRequest:
    return machine.submit(ledger, EMPLOYEE.id, date(2024, 5, 6), date(2024, 5, 5 + days), "Family visit")


# ---------------------------------------------------------------------------
# Submit
# ---------------------------------------------------------------------------


def test_submit_builds_pending_request(machine: LeaveRequestStateMachine) -> None:
    ledger = LeaveBalanceLedger(24)
    request = _submit(machine, ledger)

    assert request.status == LeaveStatus.PENDING
    assert request.employee_id == EMPLOYEE.id
    assert request.applied_on == NOW
    assert request.decided_by is None
    assert request.decided_on is None
    assert ledger.pending_days == 3
    assert ledger.available_days == 21


def test_submit_strips_reason(machine: LeaveRequestStateMachine) -> None:
    request = machine.submit(LeaveBalanceLedger(24), EMPLOYEE.id, date(2024, 5, 6), date(2024, 5, 6), "  Dentist \n")
    assert request.reason == "Dentist"


@pytest.mark.parametrize("reason", ["", "   "])
def test_submit_empty_reason_rejected(machine: LeaveRequestStateMachine, reason: str) -> None:
    ledger = LeaveBalanceLedger(24)
    with pytest.raises(ValidationError, match="Reason"):
        machine.submit(ledger, EMPLOYEE.id, date(2024, 5, 6), date(2024, 5, 7), reason)
    assert ledger.movements == []


def test_submit_end_before_start_leaves_ledger_untouched(machine: LeaveRequestStateMachine) -> None:
    ledger = LeaveBalanceLedger(24)
    with pytest.raises(InvalidRangeError):
        machine.submit(ledger, EMPLOYEE.id, date(2024, 5, 7), date(2024, 5, 6), "Trip")
    assert ledger.available_days == 24
    assert ledger.movements == []


def test_submit_insufficient_balance(machine: LeaveRequestStateMachine) -> None:
    ledger = LeaveBalanceLedger(2)
    with pytest.raises(InsufficientBalanceError):
        _submit(machine, ledger, days=3)
    assert ledger.pending_days == 0


# ---------------------------------------------------------------------------
# Decide
# ---------------------------------------------------------------------------


def test_approve_commits_reserved_days(machine: LeaveRequestStateMachine) -> None:
    ledger = LeaveBalanceLedger(24)
    request = _submit(machine, ledger)

    machine.decide(request, ledger, MANAGER, Decision.APPROVE, "Enjoy")

    assert request.status == LeaveStatus.APPROVED
    assert request.decided_by == MANAGER.id
    assert request.decided_on == NOW
    assert request.comments == "Enjoy"
    assert ledger.as_values() == {"current_balance": 24, "used_days": 3, "pending_days": 0, "available_days": 21}
    assert [t for t, _ in ledger.movements] == [LedgerEntryType.RESERVE, LedgerEntryType.COMMIT]


def test_reject_releases_reserved_days(machine: LeaveRequestStateMachine) -> None:
    ledger = LeaveBalanceLedger(24)
    request = _submit(machine, ledger)

    machine.decide(request, ledger, MANAGER, Decision.REJECT, "Team offsite that week")

    assert request.status == LeaveStatus.REJECTED
    assert ledger.as_values() == {"current_balance": 24, "used_days": 0, "pending_days": 0, "available_days": 24}


def test_decision_comment_defaults_to_decider_name(machine: LeaveRequestStateMachine) -> None:
    ledger = LeaveBalanceLedger(24)
    request = _submit(machine, ledger)

    machine.decide(request, ledger, MANAGER, Decision.APPROVE)

    assert request.comments == "APPROVED by Mona Diaz"


def test_employee_cannot_decide(machine: LeaveRequestStateMachine) -> None:
    ledger = LeaveBalanceLedger(24)
    request = _submit(machine, ledger)

    with pytest.raises(AuthorizationError):
        machine.decide(request, ledger, EMPLOYEE, Decision.APPROVE)
    assert request.status == LeaveStatus.PENDING
    assert ledger.pending_days == 3


@pytest.mark.parametrize("first", [Decision.APPROVE, Decision.REJECT])
@pytest.mark.parametrize("second", [Decision.APPROVE, Decision.REJECT])
def test_second_decision_rejected(machine: LeaveRequestStateMachine, first: Decision, second: Decision) -> None:
    ledger = LeaveBalanceLedger(24)
    request = _submit(machine, ledger)
    machine.decide(request, ledger, MANAGER, first)
    settled = ledger.as_values()

    with pytest.raises(AlreadyDecidedError):
        machine.decide(request, ledger, MANAGER, second)
    assert request.status == LeaveStatus(first.value)
    assert ledger.as_values() == settled
