from __future__ import annotations

import enum


class Role(enum.StrEnum):
    """Closed set of roles an employee can hold."""

    EMPLOYEE = "EMPLOYEE"
    MANAGER = "MANAGER"
    HR = "HR"
    ADMIN = "ADMIN"


class LeaveStatus(enum.StrEnum):
    """State machine for leave requests. APPROVED and REJECTED are terminal."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Decision(enum.StrEnum):
    """Decision applied to a pending request; the value is the resulting status."""

    APPROVE = "APPROVED"
    REJECT = "REJECTED"


class LedgerEntryType(enum.StrEnum):
    """Type of ledger entry affecting balance."""

    RESERVE = "RESERVE"
    COMMIT = "COMMIT"
    RELEASE = "RELEASE"
    ADJUSTMENT = "ADJUSTMENT"


class LedgerSourceType(enum.StrEnum):
    """Origin of a ledger entry."""

    REQUEST = "REQUEST"
    ADMIN = "ADMIN"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    EMPLOYEE = "EMPLOYEE"
    REQUEST = "REQUEST"
    ADJUSTMENT = "ADJUSTMENT"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
