from __future__ import annotations

from typing import TYPE_CHECKING

from leavedesk.exceptions import InsufficientBalanceError, ValidationError
from leavedesk.models.enums import LedgerEntryType

if TYPE_CHECKING:
    from leavedesk.models.balance import LeaveBalance


class LeaveBalanceLedger:
    """In-memory working copy of one employee's balance.

    Every operation either applies completely or raises before touching any
    quantity, and keeps ``available == current - used - pending``. Applied
    operations are recorded in ``movements`` so the caller can persist one
    ledger entry per movement alongside the balance write.
    """

    def __init__(self, current_balance: int, used_days: int = 0, pending_days: int = 0) -> None:
        if min(current_balance, used_days, pending_days) < 0:
            msg = "Balance quantities must be non-negative"
            raise ValidationError(msg)
        if used_days + pending_days > current_balance:
            msg = "Used and pending days exceed the current balance"
            raise ValidationError(msg)
        self.current_balance = current_balance
        self.used_days = used_days
        self.pending_days = pending_days
        self.available_days = current_balance - used_days - pending_days
        self.movements: list[tuple[LedgerEntryType, int]] = []

    @classmethod
    def from_balance(cls, balance: LeaveBalance) -> LeaveBalanceLedger:
        """Build a ledger from a stored balance row."""
        ledger = cls(balance.current_balance, balance.used_days, balance.pending_days)
        if ledger.available_days != balance.available_days:
            msg = f"Stored balance for employee {balance.employee_id} violates the available-days identity"
            raise ValidationError(msg)
        return ledger

    def as_values(self) -> dict[str, int]:
        """Column values for writing the ledger back to its balance row."""
        return {
            "current_balance": self.current_balance,
            "used_days": self.used_days,
            "pending_days": self.pending_days,
            "available_days": self.available_days,
        }

    # ------------------------------------------------------------------
    # Movements
    # ------------------------------------------------------------------

    def reserve(self, days: int) -> None:
        """Hold ``days`` for a request awaiting a decision."""
        _require_positive(days)
        if days > self.available_days:
            msg = f"Insufficient leave balance: requested {days} day(s), {self.available_days} available"
            raise InsufficientBalanceError(msg)
        self.pending_days += days
        self.available_days -= days
        self.movements.append((LedgerEntryType.RESERVE, days))

    def commit_used(self, days: int) -> None:
        """Convert reserved days into used days on approval."""
        _require_positive(days)
        self._require_pending(days)
        self.pending_days -= days
        self.used_days += days
        self.movements.append((LedgerEntryType.COMMIT, days))

    def release(self, days: int) -> None:
        """Return reserved days to the available pool on rejection."""
        _require_positive(days)
        self._require_pending(days)
        self.pending_days -= days
        self.available_days += days
        self.movements.append((LedgerEntryType.RELEASE, days))

    def adjust(self, days: int) -> None:
        """Grant (positive) or deduct (negative) entitlement days."""
        if days == 0:
            msg = "Adjustment must be non-zero"
            raise ValidationError(msg)
        if self.available_days + days < 0:
            msg = f"Insufficient leave balance: cannot deduct {-days} day(s), {self.available_days} available"
            raise InsufficientBalanceError(msg)
        self.current_balance += days
        self.available_days += days
        self.movements.append((LedgerEntryType.ADJUSTMENT, days))

    def _require_pending(self, days: int) -> None:
        if days > self.pending_days:
            msg = f"Cannot settle {days} day(s): only {self.pending_days} pending"
            raise ValidationError(msg)


def _require_positive(days: int) -> None:
    if days <= 0:
        msg = "Day count must be positive"
        raise ValidationError(msg)
