"""Role and ownership rules for every leave operation.

All decisions here are pure functions of the principal, the action and, where
relevant, the target request or employee. The principal's role always comes
from the employee directory; nothing in this module looks at client input.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from leavedesk.exceptions import AlreadyDecidedError, AuthorizationError
from leavedesk.models.enums import LeaveStatus, Role

if TYPE_CHECKING:
    import uuid

    from leavedesk.models.request import LeaveRequest
    from leavedesk.schemas.auth import Principal


class Action(enum.StrEnum):
    """Operations gated by role."""

    SUBMIT_SELF = "SUBMIT_SELF"
    SUBMIT_FOR_OTHER = "SUBMIT_FOR_OTHER"
    LIST = "LIST"
    DECIDE = "DECIDE"
    VIEW = "VIEW"
    ADJUST_BALANCE = "ADJUST_BALANCE"
    MANAGE_EMPLOYEES = "MANAGE_EMPLOYEES"


_ALL_ROLES = frozenset(Role)
_PRIVILEGED = frozenset({Role.MANAGER, Role.HR, Role.ADMIN})
_PEOPLE_ADMINS = frozenset({Role.HR, Role.ADMIN})

# Roles allowed to perform each action. Ownership and status conditions are
# applied on top of this in can_perform.
_PERMISSIONS: dict[Action, frozenset[Role]] = {
    Action.SUBMIT_SELF: _ALL_ROLES,
    Action.SUBMIT_FOR_OTHER: _PRIVILEGED,
    Action.LIST: _ALL_ROLES,
    Action.DECIDE: _PRIVILEGED,
    Action.VIEW: _ALL_ROLES,
    Action.ADJUST_BALANCE: _PEOPLE_ADMINS,
    Action.MANAGE_EMPLOYEES: _PEOPLE_ADMINS,
}


def can_perform(principal: Principal, action: Action, request: LeaveRequest | None = None) -> bool:
    """Return whether ``principal`` may perform ``action`` (on ``request``).

    Raises AlreadyDecidedError for DECIDE on a request that is no longer
    pending, whatever the principal's role.
    """
    if action is Action.DECIDE:
        if request is None:
            msg = "DECIDE requires a request"
            raise ValueError(msg)
        if request.status != LeaveStatus.PENDING:
            msg = f"Leave request {request.id} has already been {request.status.lower()}"
            raise AlreadyDecidedError(msg)

    if principal.role not in _PERMISSIONS[action]:
        return False

    if action is Action.VIEW and request is not None:
        return can_access_employee(principal, request.employee_id)
    return True


def ensure_can_perform(principal: Principal, action: Action, request: LeaveRequest | None = None) -> None:
    """Raise AuthorizationError unless ``can_perform`` allows the action."""
    if not can_perform(principal, action, request):
        msg = f"Role {principal.role} is not allowed to perform {action}"
        raise AuthorizationError(msg)


def can_access_employee(principal: Principal, employee_id: uuid.UUID) -> bool:
    """Whether ``principal`` may read leave data (balance, ledger, requests) of ``employee_id``."""
    return principal.role in _PRIVILEGED or principal.id == employee_id


def list_scope(principal: Principal) -> uuid.UUID | None:
    """Employee id every list query must be restricted to, or None for all employees."""
    if principal.role in _PRIVILEGED:
        return None
    return principal.id
