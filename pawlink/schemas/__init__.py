"""Pydantic request/response schemas."""

from pawlink.schemas.report import (
    ReportStatus, Urgency, ReportCreate, ReportRead, ScheduleRequest, ScheduleDraftRead,
)
from pawlink.schemas.notification import NotificationType, NotificationRead

__all__ = [
    "ReportStatus", "Urgency", "ReportCreate", "ReportRead",
    "ScheduleRequest", "ScheduleDraftRead",
    "NotificationType", "NotificationRead",
]
