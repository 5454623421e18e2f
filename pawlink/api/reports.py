"""Rescue report API — responder feed, scheduling and accept/decline transitions."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from pawlink.db.store import RecordStore
from pawlink.dependencies import (
    get_controller, get_dispatcher, get_repository, get_store, require_actor,
)
from pawlink.schemas.report import ReportCreate, ReportRead, ScheduleDraftRead, ScheduleRequest
from pawlink.services.identity import Actor
from pawlink.services.lifecycle import RescueLifecycleController
from pawlink.services.notifications import NotificationDispatcher
from pawlink.services.report_repository import ReportRepository
from pawlink.services.submission import submit_report
from pawlink.time_utils import format_iso_z

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("", response_model=list[ReportRead])
async def list_reports(
    tab: str | None = Query(default=None),
    ctrl: RescueLifecycleController = Depends(get_controller),
):
    await ctrl.list_reports(ctrl.actor.id, ctrl.actor.is_admin)
    if tab:
        return list(ctrl.filter_by_tab(tab))
    return list(ctrl.reports)


@router.post("", status_code=201, response_model=ReportRead)
async def create_report(
    body: ReportCreate,
    actor: Actor = Depends(require_actor),
    store: RecordStore = Depends(get_store),
    repository: ReportRepository = Depends(get_repository),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return await submit_report(actor, body, store, repository, dispatcher)


@router.get("/{report_id}/schedule", response_model=ScheduleDraftRead)
async def open_schedule(
    report_id: str,
    ctrl: RescueLifecycleController = Depends(get_controller),
):
    await ctrl.load_report(report_id)
    draft = ctrl.open_schedule(report_id)
    return ScheduleDraftRead(
        report_id=draft.report_id,
        pickup_date=draft.pickup_date,
        pickup_time=draft.pickup_time,
    )


@router.post("/{report_id}/schedule", response_model=ScheduleDraftRead)
async def stage_schedule(
    report_id: str,
    body: ScheduleRequest,
    ctrl: RescueLifecycleController = Depends(get_controller),
):
    await ctrl.load_report(report_id)
    pending = ctrl.request_accept(report_id, body.pickup_date, body.pickup_time)
    return ScheduleDraftRead(
        report_id=pending.report_id,
        pickup_date=pending.pickup_date,
        pickup_time=pending.pickup_time,
        expected_pickup_time=format_iso_z(pending.expected_pickup_time),
    )


@router.delete("/{report_id}/schedule", status_code=204)
async def cancel_schedule(
    report_id: str,
    ctrl: RescueLifecycleController = Depends(get_controller),
):
    ctrl.cancel_schedule(report_id)


@router.post("/{report_id}/accept", response_model=ReportRead)
async def accept_report(
    report_id: str,
    body: ScheduleRequest,
    ctrl: RescueLifecycleController = Depends(get_controller),
):
    await ctrl.load_report(report_id)
    pending = ctrl.request_accept(report_id, body.pickup_date, body.pickup_time)
    return await ctrl.confirm_accept(pending)


@router.post("/{report_id}/decline", response_model=ReportRead)
async def decline_report(
    report_id: str,
    ctrl: RescueLifecycleController = Depends(get_controller),
):
    return await ctrl.decline(report_id)
