"""Report model — a stray-animal incident raised by a citizen."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Float, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from pawlink.models.base import Base, ULIDMixin


class Report(Base, ULIDMixin):
    __tablename__ = "reports"

    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("profiles.id"), index=True)
    description: Mapped[str] = mapped_column(Text, default="")
    location: Mapped[str] = mapped_column(String(500), default="")
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    urgency: Mapped[str] = mapped_column(String(20), default="medium")  # low | medium | high | critical
    status: Mapped[str] = mapped_column(String(20), default="pending")  # pending | accepted | declined
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True, default=None)
    expected_pickup_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None)
    assigned_rescuer_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("profiles.id"), nullable=True, default=None, index=True
    )
