"""Scheduling dialog state for an in-progress accept action.

The draft lives only in memory. It is opened with a default of tomorrow
at 09:00, edited by the rescuer, and discarded on cancel or once the
accept transition has been confirmed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from pawlink.errors import ValidationError
from pawlink.time_utils import get_zone

DEFAULT_PICKUP_TIME = "09:00"


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValidationError(f"Invalid pickup date '{value}' (expected YYYY-MM-DD)", field="pickup_date") from exc


def _parse_time(value: str) -> time:
    try:
        return time.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValidationError(f"Invalid pickup time '{value}' (expected HH:MM)", field="pickup_time") from exc


@dataclass
class SchedulingDraft:
    report_id: str
    pickup_date: str = ""
    pickup_time: str = ""

    @classmethod
    def open(
        cls,
        report_id: str,
        today: date | None = None,
        default_time: str = DEFAULT_PICKUP_TIME,
    ) -> "SchedulingDraft":
        today = today or datetime.now(timezone.utc).date()
        return cls(
            report_id=report_id,
            pickup_date=(today + timedelta(days=1)).isoformat(),
            pickup_time=default_time,
        )

    def validate(self) -> None:
        if not (self.pickup_date or "").strip():
            raise ValidationError("Please select both date and time", field="pickup_date")
        if not (self.pickup_time or "").strip():
            raise ValidationError("Please select both date and time", field="pickup_time")
        _parse_date(self.pickup_date)
        _parse_time(self.pickup_time)

    def to_timestamp(self, tz_name: str = "UTC") -> datetime:
        """Combine date + time in the pickup timezone, returned as aware UTC."""
        self.validate()
        local = datetime.combine(
            _parse_date(self.pickup_date),
            _parse_time(self.pickup_time),
            tzinfo=get_zone(tz_name),
        )
        return local.astimezone(timezone.utc)

    def to_transition(self, tz_name: str = "UTC") -> "PendingTransition":
        ts = self.to_timestamp(tz_name)
        return PendingTransition(
            report_id=self.report_id,
            pickup_date=_parse_date(self.pickup_date).isoformat(),
            pickup_time=_parse_time(self.pickup_time).strftime("%H:%M"),
            expected_pickup_time=ts,
        )


@dataclass(frozen=True)
class PendingTransition:
    """A validated accept request awaiting confirmation."""

    report_id: str
    pickup_date: str
    pickup_time: str
    expected_pickup_time: datetime | None = None
