"""Rescue lifecycle controller — per-actor report view and accept/decline transitions.

The controller owns the list of reports visible to one actor. Transitions
are applied to that list optimistically before the store confirms them; if
the store rejects the write, only the affected report is restored from its
pre-transition snapshot. A successful accept notifies the reporter in a
separate task whose failure is logged and otherwise ignored.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from typing import Any

from pawlink.config import SchedulingConfig
from pawlink.errors import (
    AuthorizationError, InvalidTransitionError, NotFoundError, PawLinkError,
    StoreError, TransitionInFlightError, ValidationError,
)
from pawlink.schemas.notification import NotificationType
from pawlink.schemas.report import ReportRead, ReportStatus
from pawlink.services.identity import Actor, require_report_access
from pawlink.services.notifications import NotificationDispatcher
from pawlink.services.report_repository import ReportFilter, ReportRepository
from pawlink.services.scheduling import PendingTransition, SchedulingDraft

logger = logging.getLogger(__name__)

TABS = (ReportStatus.PENDING, ReportStatus.ACCEPTED, ReportStatus.DECLINED)


class RescueLifecycleController:
    def __init__(
        self,
        actor: Actor,
        repository: ReportRepository,
        dispatcher: NotificationDispatcher,
        scheduling: SchedulingConfig | None = None,
    ):
        self._actor = actor
        self._repository = repository
        self._dispatcher = dispatcher
        self._scheduling = scheduling or SchedulingConfig()
        self._reports: list[ReportRead] = []
        self._in_flight: set[str] = set()
        self._drafts: dict[str, SchedulingDraft] = {}
        self._tasks: set[asyncio.Task] = set()
        self._last_query: tuple[str, bool] | None = None
        self.error: str | None = None

    # ── Read-only views ──────────────────────────────────

    @property
    def actor(self) -> Actor:
        return self._actor

    @property
    def loaded(self) -> bool:
        return self._last_query is not None and self.error is None

    @property
    def reports(self) -> tuple[ReportRead, ...]:
        return tuple(self._reports)

    def get(self, report_id: str) -> ReportRead:
        for report in self._reports:
            if report.id == report_id:
                return report
        raise NotFoundError(f"Report {report_id} is not in your feed")

    def is_in_flight(self, report_id: str) -> bool:
        return report_id in self._in_flight

    def filter_by_tab(self, tab: str | ReportStatus) -> tuple[ReportRead, ...]:
        try:
            status = ReportStatus(tab)
        except ValueError as exc:
            raise ValidationError(f"Unknown tab '{tab}'", field="tab") from exc
        return tuple(r for r in self._reports if r.status is status)

    # ── Listing ──────────────────────────────────────────

    async def list_reports(self, actor_id: str, is_admin: bool) -> tuple[ReportRead, ...]:
        """Load the actor's feed: every report for admins, else only assigned ones."""
        actor = require_report_access(self._actor)
        if is_admin and not actor.is_admin:
            raise AuthorizationError("Only admins can list every report")
        if actor_id != actor.id and not actor.is_admin:
            raise AuthorizationError("Cannot list reports assigned to another responder")

        report_filter = ReportFilter.all() if is_admin else ReportFilter.assigned(actor_id)
        self._last_query = (actor_id, is_admin)
        try:
            reports = await self._repository.fetch_all(report_filter)
        except StoreError as exc:
            self._reports = []
            self.error = exc.message or "Could not load reports"
            logger.error("Loading reports for %s failed: %s", actor_id, exc.message)
            raise
        # Reports with a write in flight keep their optimistic value
        pending = {r.id: r for r in self._reports if r.id in self._in_flight}
        reports = [pending.get(r.id, r) for r in reports]
        self._reports = sorted(reports, key=lambda r: r.created_at, reverse=True)
        self.error = None
        return self.reports

    async def refresh(self) -> tuple[ReportRead, ...]:
        if self._last_query is None:
            return await self.list_reports(self._actor.id, self._actor.is_admin)
        return await self.list_reports(*self._last_query)

    async def load_report(self, report_id: str) -> ReportRead:
        """Report from the feed, reloading the feed once if it is stale or missing it."""
        if self.loaded:
            for report in self._reports:
                if report.id == report_id:
                    return report
        await self.refresh()
        return self.get(report_id)

    # ── Scheduling dialog ────────────────────────────────

    def open_schedule(self, report_id: str) -> SchedulingDraft:
        """Open (or reopen) the pickup draft, defaulting to tomorrow at the configured time."""
        self._check_transition(report_id)
        draft = self._drafts.get(report_id)
        if draft is None:
            draft = SchedulingDraft.open(report_id, default_time=self._scheduling.default_pickup_time)
            self._drafts[report_id] = draft
        return draft

    def cancel_schedule(self, report_id: str) -> None:
        self._drafts.pop(report_id, None)

    def request_accept(self, report_id: str, pickup_date: str, pickup_time: str) -> PendingTransition:
        """Validate the pickup date/time and stage an accept. Nothing is mutated."""
        draft = SchedulingDraft(report_id, pickup_date or "", pickup_time or "")
        draft.validate()
        self._check_transition(report_id)
        self._drafts[report_id] = draft
        return draft.to_transition(self._scheduling.pickup_timezone)

    # ── Transitions ──────────────────────────────────────

    async def confirm_accept(self, pending: PendingTransition) -> ReportRead:
        draft = SchedulingDraft(pending.report_id, pending.pickup_date or "", pending.pickup_time or "")
        transition = draft.to_transition(self._scheduling.pickup_timezone)
        await self.load_report(transition.report_id)
        self._check_transition(transition.report_id)

        report = await self._apply(transition.report_id, {
            "status": ReportStatus.ACCEPTED,
            "expected_pickup_time": transition.expected_pickup_time,
        })
        self._drafts.pop(transition.report_id, None)
        self._dispatch_notification(report, transition)
        return report

    async def decline(self, report_id: str) -> ReportRead:
        await self.load_report(report_id)
        self._check_transition(report_id)
        report = await self._apply(report_id, {
            "status": ReportStatus.DECLINED,
            "expected_pickup_time": None,
        })
        self._drafts.pop(report_id, None)
        return report

    async def drain(self) -> None:
        """Wait for outstanding notification tasks."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ── internals ────────────────────────────────────────

    def _check_transition(self, report_id: str) -> ReportRead:
        actor = require_report_access(self._actor)
        if report_id in self._in_flight:
            raise TransitionInFlightError(f"Report {report_id} is already being updated")
        report = self.get(report_id)
        if not actor.is_admin and report.assigned_rescuer_id != actor.id:
            raise AuthorizationError("This report is assigned to another responder")
        if report.status.is_terminal:
            raise InvalidTransitionError(f"Report {report_id} is already {report.status.value}")
        return report

    def _index_of(self, report_id: str) -> int | None:
        for i, report in enumerate(self._reports):
            if report.id == report_id:
                return i
        return None

    def _swap(self, report_id: str, expected: ReportRead, replacement: ReportRead) -> None:
        """Replace the report only if its slot still holds ``expected``."""
        i = self._index_of(report_id)
        if i is not None and self._reports[i] is expected:
            self._reports[i] = replacement

    async def _apply(self, report_id: str, fields: dict[str, Any]) -> ReportRead:
        snapshot = self.get(report_id)
        optimistic = snapshot.model_copy(update=fields)
        self._in_flight.add(report_id)
        self._swap(report_id, snapshot, optimistic)
        try:
            confirmed = await self._repository.update_status(
                report_id, fields, expected_status=snapshot.status,
            )
        except NotFoundError:
            self._swap(report_id, optimistic, snapshot)
            logger.warning("Report %s vanished during %s; refreshing", report_id, fields["status"].value)
            await self._refresh_quietly()
            raise
        except InvalidTransitionError:
            self._swap(report_id, optimistic, snapshot)
            logger.warning("Report %s changed in the store before %s; reloading it", report_id, fields["status"].value)
            await self._reload_report(report_id, snapshot)
            raise
        except BaseException:
            self._swap(report_id, optimistic, snapshot)
            logger.warning("Rolled back %s on report %s", fields["status"].value, report_id)
            raise
        finally:
            self._in_flight.discard(report_id)

        self._swap(report_id, optimistic, confirmed)
        logger.info("Report %s %s by %s", report_id, confirmed.status.value, self._actor.id)
        return confirmed

    async def _refresh_quietly(self) -> None:
        try:
            await self.refresh()
        except PawLinkError:
            logger.warning("Refresh after missing report failed", exc_info=True)

    async def _reload_report(self, report_id: str, current: ReportRead) -> None:
        try:
            fresh = await self._repository.get(report_id)
        except PawLinkError:
            logger.warning("Reloading report %s failed", report_id, exc_info=True)
            return
        self._swap(report_id, current, fresh)

    def _dispatch_notification(self, report: ReportRead, transition: PendingTransition) -> None:
        task = asyncio.create_task(self._notify_reporter(report, transition))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _notify_reporter(self, report: ReportRead, transition: PendingTransition) -> None:
        try:
            await self._dispatcher.notify(
                report.user_id,
                NotificationType.STATUS_CHANGE,
                "Rescue Scheduled",
                f"Your rescue report has been accepted. Pickup is scheduled for "
                f"{transition.pickup_date} at {transition.pickup_time}.",
            )
        except Exception:
            logger.exception("Failed to notify reporter %s about report %s", report.user_id, report.id)


class LifecycleSessions:
    """LRU cache of per-actor controllers, so an actor's view survives between requests."""

    def __init__(self, max_size: int = 200):
        self._controllers: OrderedDict[str, RescueLifecycleController] = OrderedDict()
        self._max_size = max_size

    def get(
        self,
        actor: Actor,
        repository: ReportRepository,
        dispatcher: NotificationDispatcher,
        scheduling: SchedulingConfig | None = None,
    ) -> RescueLifecycleController:
        ctrl = self._controllers.get(actor.id)
        if ctrl is not None and ctrl.actor == actor:
            self._controllers.move_to_end(actor.id)
            return ctrl

        ctrl = RescueLifecycleController(actor, repository, dispatcher, scheduling)
        self._controllers[actor.id] = ctrl
        self._controllers.move_to_end(actor.id)
        if len(self._controllers) > self._max_size:
            self._controllers.popitem(last=False)
        return ctrl

    async def drain(self) -> None:
        for ctrl in list(self._controllers.values()):
            await ctrl.drain()

    def clear(self) -> None:
        self._controllers.clear()
