"""Declarative base for the rescue tables.

Every row gets a ULID string id and a UTC ``created_at``; feeds and inboxes
sort on ``created_at`` so it is indexed.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from ulid import ULID

from pawlink.time_utils import get_utc_now


def new_id() -> str:
    return str(ULID())


class Base(DeclarativeBase):
    pass


class ULIDMixin:
    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=new_id)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=get_utc_now, index=True)
