from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, field_serializer, field_validator

from pawlink.time_utils import ensure_utc, format_iso_z


class NotificationType(str, enum.Enum):
    STATUS_CHANGE = "status_change"
    ALERT = "alert"
    EMERGENCY = "emergency"
    SUCCESS = "success"
    GENERIC = "generic"


class NotificationRead(BaseModel):
    id: str
    user_id: str
    type: NotificationType = NotificationType.GENERIC
    title: str = ""
    message: str = ""
    link: str | None = None
    is_read: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_serializer("created_at")
    def _iso_z(self, v: datetime) -> str:
        return format_iso_z(v)
