from datetime import datetime, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from pawlink.schemas import (
    NotificationRead,
    NotificationType,
    ReportCreate,
    ReportRead,
    ReportStatus,
    ScheduleRequest,
    Urgency,
)


def test_report_create_with_location_text():
    report = ReportCreate(description="Puppy near bus stand", location="Pettah", assigned_rescuer_id="rescuer-1")
    assert report.urgency is Urgency.MEDIUM
    assert report.latitude is None


def test_report_create_with_coordinates_only():
    report = ReportCreate(
        description="Limping cat", latitude=6.9271, longitude=79.8612,
        urgency="critical", assigned_rescuer_id="shelter-1",
    )
    assert report.urgency is Urgency.CRITICAL


def test_report_create_requires_some_location():
    with pytest.raises(PydanticValidationError):
        ReportCreate(description="Somewhere", assigned_rescuer_id="rescuer-1")


def test_report_create_rejects_unknown_urgency():
    with pytest.raises(PydanticValidationError):
        ReportCreate(description="x", location="y", urgency="extreme", assigned_rescuer_id="r")


def test_report_read_normalises_naive_timestamps_to_utc():
    report = ReportRead(
        id="r1", user_id="c1", status="accepted",
        created_at=datetime(2025, 5, 30, 12, 0),
        expected_pickup_time=datetime(2025, 6, 1, 9, 0),
    )
    assert report.created_at.tzinfo is timezone.utc
    assert report.status is ReportStatus.ACCEPTED
    assert report.model_dump(mode="json")["expected_pickup_time"] == "2025-06-01T09:00:00.000Z"


def test_report_read_is_immutable():
    report = ReportRead(id="r1", user_id="c1", created_at=datetime.now(timezone.utc))
    with pytest.raises(PydanticValidationError):
        report.status = ReportStatus.DECLINED
    declined = report.model_copy(update={"status": ReportStatus.DECLINED})
    assert report.status is ReportStatus.PENDING
    assert declined.status is ReportStatus.DECLINED


def test_schedule_request_allows_empty_fields():
    req = ScheduleRequest()
    assert req.pickup_date == ""
    assert req.pickup_time == ""


def test_notification_read_defaults():
    n = NotificationRead(id="n1", user_id="u1", created_at=datetime.now(timezone.utc))
    assert n.type is NotificationType.GENERIC
    assert n.is_read is False
