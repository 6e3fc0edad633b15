from __future__ import annotations

from sqlmodel import Field

from leavedesk.models.base import CreatedAtMixin, UUIDBase
from leavedesk.models.enums import Role


class Employee(UUIDBase, CreatedAtMixin, table=True):
    """Directory record for an employee. Provisioned by onboarding, read by the leave core."""

    __tablename__ = "employee"

    name: str = Field(max_length=255)
    email: str = Field(max_length=255, unique=True, index=True)
    role: str = Field(default=Role.EMPLOYEE, max_length=50, sa_column_kwargs={"server_default": "EMPLOYEE"})
    designation: str | None = Field(default=None, max_length=255)
    department: str | None = Field(default=None, max_length=255)
