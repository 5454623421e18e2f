"""Profile model — actor records materialised by the identity provider."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from pawlink.models.base import Base, ULIDMixin, new_id


class Profile(Base, ULIDMixin):
    __tablename__ = "profiles"

    # Identity provider ids (e.g. UUIDs) are wider than a ULID
    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    full_name: Mapped[str] = mapped_column(String(255), default="")
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True, default=None)
    role: Mapped[str] = mapped_column(String(20), default="citizen")  # citizen | rescuer | shelter | vet | admin
