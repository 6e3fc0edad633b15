# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header

from leavedesk.db import SessionDep
from leavedesk.schemas.auth import Principal
from leavedesk.services.employee import resolve_principal


async def get_principal(
    session: SessionDep,
    x_user_id: uuid.UUID = Header(),
) -> Principal:
    """Resolve the authenticated caller.

    The session layer in front of this service forwards the user id; the
    role is looked up here and never taken from the client.
    """
    return await resolve_principal(session, x_user_id)


PrincipalDep = Annotated[Principal, Depends(get_principal)]
