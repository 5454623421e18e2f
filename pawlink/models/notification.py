"""Notification model — one-way message to a user about a report."""

from __future__ import annotations

from sqlalchemy import String, Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column

from pawlink.models.base import Base, ULIDMixin


class Notification(Base, ULIDMixin):
    __tablename__ = "notifications"

    user_id: Mapped[str] = mapped_column(String(64), index=True)
    type: Mapped[str] = mapped_column(String(30), default="generic")  # status_change | alert | emergency | success | generic
    title: Mapped[str] = mapped_column(String(255), default="")
    message: Mapped[str] = mapped_column(Text, default="")
    link: Mapped[str | None] = mapped_column(String(500), nullable=True, default=None)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
