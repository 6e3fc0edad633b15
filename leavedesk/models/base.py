from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def now_utc() -> datetime:
    """Return the current UTC time."""
    return datetime.now(UTC)


def utc_timestamp(*, index: bool = False, server_default: bool = True) -> Any:
    """Non-null timezone-aware timestamp column stamped with the current UTC time."""
    column_kwargs: dict[str, Any] = {"server_default": sa.func.now()} if server_default else {}
    return Field(
        default_factory=now_utc,
        index=index,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs=column_kwargs,
    )


class UUIDBase(SQLModel):
    """Base model with a client-generated UUID v4 primary key.

    Ids exist before the row is flushed, so a request's ledger entries and
    audit record can reference it inside the same unit of work.
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, sa_type=sa.Uuid)


class CreatedAtMixin(SQLModel):
    created_at: datetime = utc_timestamp()
