"""Citizen report submission: create a pending report routed to a chosen responder."""

from __future__ import annotations

import logging

from pawlink.db.store import RecordStore
from pawlink.errors import AuthorizationError, NotificationError, StoreError, ValidationError
from pawlink.schemas.notification import NotificationType
from pawlink.schemas.report import ReportCreate, ReportRead
from pawlink.services.identity import Actor, can_be_assigned, can_submit_reports, lookup_role
from pawlink.services.notifications import NotificationDispatcher
from pawlink.services.report_repository import ReportRepository

logger = logging.getLogger(__name__)


async def _ensure_profile(actor: Actor, store: RecordStore) -> None:
    """Reports reference the reporter profile; create a bare one on first submission."""
    if await lookup_role(store, actor.id) is not None:
        return
    try:
        await store.insert("profiles", [{"id": actor.id, "full_name": actor.display_name, "role": actor.role.value}])
    except StoreError:
        logger.warning("Could not ensure profile exists for %s", actor.id, exc_info=True)


async def submit_report(
    actor: Actor,
    payload: ReportCreate,
    store: RecordStore,
    repository: ReportRepository,
    dispatcher: NotificationDispatcher,
) -> ReportRead:
    if not can_submit_reports(actor.role):
        raise AuthorizationError(
            "Only citizens can submit rescue reports. Responders receive them in their feed."
        )

    await _ensure_profile(actor, store)

    role = await lookup_role(store, payload.assigned_rescuer_id)
    if role is None or not can_be_assigned(role):
        raise ValidationError("Please select a rescuer, shelter or vet to notify", field="assigned_rescuer_id")

    report = await repository.create(
        actor.id,
        description=payload.description,
        location=payload.location,
        latitude=payload.latitude,
        longitude=payload.longitude,
        urgency=payload.urgency.value,
        image_url=payload.image_url,
        assigned_rescuer_id=payload.assigned_rescuer_id,
    )
    logger.info("Report %s submitted by %s for %s", report.id, actor.id, payload.assigned_rescuer_id)

    urgent = payload.urgency.value in ("high", "critical")
    try:
        await dispatcher.notify(
            payload.assigned_rescuer_id,
            NotificationType.EMERGENCY if payload.urgency.value == "critical" else NotificationType.ALERT,
            "New Rescue Report" + (" (urgent)" if urgent else ""),
            f"A {payload.urgency.value} urgency report was sent to you: "
            f"{payload.location or 'location pinned on map'}.",
            link="/rescuer-feed",
        )
    except NotificationError:
        logger.exception("Could not alert responder %s about report %s", payload.assigned_rescuer_id, report.id)
    return report
