"""Report repository — report CRUD over the record store, with reporter enrichment."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from pawlink.db.store import Record, RecordStore
from pawlink.errors import InvalidTransitionError, NotFoundError, StoreError
from pawlink.schemas.report import ReportRead, ReportStatus

logger = logging.getLogger(__name__)

REPORTS = "reports"
PROFILES = "profiles"


@dataclass(frozen=True)
class ReportFilter:
    """Either every report (admin) or the reports assigned to one responder."""

    assigned_to: str | None = None

    @classmethod
    def all(cls) -> "ReportFilter":
        return cls()

    @classmethod
    def assigned(cls, actor_id: str) -> "ReportFilter":
        return cls(assigned_to=actor_id)

    def as_filters(self) -> dict[str, Any]:
        if self.assigned_to is None:
            return {}
        return {"assigned_rescuer_id": self.assigned_to}


class ReportRepository:
    def __init__(self, store: RecordStore):
        self._store = store

    async def fetch_all(self, report_filter: ReportFilter) -> list[ReportRead]:
        """Newest-first reports matching the filter, enriched with reporter data."""
        rows = await self._store.select(
            REPORTS, report_filter.as_filters(), order_by="created_at", descending=True,
        )
        return await self._enrich(rows)

    async def get(self, report_id: str) -> ReportRead:
        rows = await self._store.select(REPORTS, {"id": report_id}, limit=1)
        if not rows:
            raise NotFoundError(f"Report {report_id} not found")
        return (await self._enrich(rows))[0]

    async def create(self, reporter_id: str, **fields: Any) -> ReportRead:
        record = {**fields, "user_id": reporter_id, "status": ReportStatus.PENDING.value}
        record.pop("expected_pickup_time", None)
        rows = await self._store.insert(REPORTS, [record])
        return (await self._enrich(rows))[0]

    async def update_status(
        self,
        report_id: str,
        fields: Mapping[str, Any],
        expected_status: ReportStatus | None = None,
    ) -> ReportRead:
        """Partial update of one report. Last write wins.

        With ``expected_status`` the write only applies while the stored
        report still has that status; otherwise InvalidTransitionError.
        """
        values = {
            k: (v.value if isinstance(v, ReportStatus) else v)
            for k, v in fields.items()
        }
        id_filter: dict[str, Any] = {"id": report_id}
        if expected_status is not None:
            id_filter["status"] = ReportStatus(expected_status).value
        rows = await self._store.update(REPORTS, id_filter, values)
        if rows:
            return (await self._enrich(rows))[0]

        if expected_status is not None:
            current = await self._store.select(REPORTS, {"id": report_id}, limit=1)
            if current:
                raise InvalidTransitionError(
                    f"Report {report_id} is already {current[0]['status']}"
                )
        raise NotFoundError(f"Report {report_id} not found")

    async def _enrich(self, rows: list[Record]) -> list[ReportRead]:
        reporter_ids = {r["user_id"] for r in rows if r.get("user_id")}
        profiles: dict[str, Record] = {}
        if reporter_ids:
            try:
                found = await self._store.select(PROFILES, {"id": sorted(reporter_ids)})
                profiles = {p["id"]: p for p in found}
            except StoreError:
                logger.exception("Reporter lookup failed for %d report(s); using defaults", len(rows))

        reports = []
        for row in rows:
            profile = profiles.get(row.get("user_id"), {})
            reports.append(ReportRead.model_validate({
                **row,
                "reporter_name": profile.get("full_name") or "",
                "reporter_avatar_url": profile.get("avatar_url"),
            }))
        return reports
