from sqlmodel import SQLModel

from leavedesk.models.audit import AuditLog
from leavedesk.models.balance import LeaveBalance
from leavedesk.models.base import CreatedAtMixin, UUIDBase
from leavedesk.models.employee import Employee
from leavedesk.models.enums import (
    AuditAction,
    AuditEntityType,
    Decision,
    LedgerEntryType,
    LedgerSourceType,
    LeaveStatus,
    Role,
)
from leavedesk.models.ledger import LeaveLedgerEntry
from leavedesk.models.request import LeaveRequest

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "CreatedAtMixin",
    "Decision",
    "Employee",
    "LeaveBalance",
    "LeaveLedgerEntry",
    "LeaveRequest",
    "LeaveStatus",
    "LedgerEntryType",
    "LedgerSourceType",
    "Role",
    "SQLModel",
    "UUIDBase",
]
