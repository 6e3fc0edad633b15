# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from leavedesk.models.enums import Role


class Principal(BaseModel):
    """Authenticated actor issuing a command, resolved server-side from the employee directory."""

    id: uuid.UUID
    role: Role
    name: str = ""

    @property
    def is_privileged(self) -> bool:
        """Managers, HR and admins act on other employees' leave."""
        return self.role != Role.EMPLOYEE
