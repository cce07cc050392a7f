"""Column building blocks shared by the leave tables.

Entitlements, ledger entries, requests, adjustments and the audit log all key on
a UUID v4 and stamp rows with timezone-aware UTC times. Employees and leave types
live outside this service and are referenced by bare UUIDs.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def now_utc() -> datetime:
    """Return the current UTC time."""
    return datetime.now(UTC)


def utc_timestamp(*, index: bool = False) -> Any:
    """A timezone-aware timestamp field defaulting to now in Python and in the database."""
    return Field(
        default_factory=now_utc,
        index=index,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )


class UUIDBase(SQLModel):
    """Base for every leave table: a UUID v4 primary key."""

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        sa_type=sa.Uuid,
    )


class TimestampMixin(SQLModel):
    """Indexed ``created_at`` for entitlements, requests and adjustments."""

    created_at: datetime = utc_timestamp(index=True)
