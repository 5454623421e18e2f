from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

from pawlink.time_utils import ensure_utc, format_iso_z


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"

    @property
    def is_terminal(self) -> bool:
        return self is not ReportStatus.PENDING


class Urgency(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ReportCreate(BaseModel):
    description: str = Field(min_length=1)
    location: str = ""
    latitude: float | None = None
    longitude: float | None = None
    urgency: Urgency = Urgency.MEDIUM
    image_url: str | None = None
    assigned_rescuer_id: str

    @model_validator(mode="after")
    def _location_or_coords(self) -> "ReportCreate":
        has_coords = self.latitude is not None and self.longitude is not None
        if not self.location.strip() and not has_coords:
            raise ValueError("Provide a location on the map or a description")
        return self


class ReportRead(BaseModel):
    id: str
    user_id: str
    description: str = ""
    location: str = ""
    latitude: float | None = None
    longitude: float | None = None
    urgency: Urgency = Urgency.MEDIUM
    status: ReportStatus = ReportStatus.PENDING
    image_url: str | None = None
    created_at: datetime
    expected_pickup_time: datetime | None = None
    assigned_rescuer_id: str | None = None
    reporter_name: str = ""
    reporter_avatar_url: str | None = None

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("created_at", "expected_pickup_time")
    @classmethod
    def _as_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v)

    @field_serializer("created_at", "expected_pickup_time")
    def _iso_z(self, v: datetime | None) -> str | None:
        return format_iso_z(v)


class ScheduleRequest(BaseModel):
    # Left unconstrained so that empty values reach the scheduling validator.
    pickup_date: str = ""
    pickup_time: str = ""


class ScheduleDraftRead(BaseModel):
    report_id: str
    pickup_date: str
    pickup_time: str
    expected_pickup_time: str | None = None
