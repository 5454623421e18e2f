"""Notification dispatcher and the recipient-side notification operations."""

from __future__ import annotations

import logging

from pawlink.db.store import RecordStore
from pawlink.errors import NotFoundError, StoreError, NotificationError
from pawlink.schemas.notification import NotificationRead, NotificationType

logger = logging.getLogger(__name__)

NOTIFICATIONS = "notifications"


class NotificationDispatcher:
    def __init__(self, store: RecordStore):
        self._store = store

    async def notify(
        self,
        target_user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        link: str | None = None,
    ) -> NotificationRead:
        """Append one notification for the target user.

        Store failures are re-raised as NotificationError so callers can
        log them without confusing them with a failed transition.
        """
        try:
            rows = await self._store.insert(NOTIFICATIONS, [{
                "user_id": target_user_id,
                "type": NotificationType(type).value,
                "title": title,
                "message": message,
                "link": link,
                "is_read": False,
            }])
        except StoreError as exc:
            raise NotificationError(f"Could not notify {target_user_id}: {exc.message}") from exc
        logger.info("Notified %s (%s): %s", target_user_id, NotificationType(type).value, title)
        return NotificationRead.model_validate(rows[0])

    # ── Recipient side ───────────────────────────────────

    async def list_for_user(self, user_id: str, unread_only: bool = False) -> list[NotificationRead]:
        filters: dict = {"user_id": user_id}
        if unread_only:
            filters["is_read"] = False
        rows = await self._store.select(NOTIFICATIONS, filters, order_by="created_at", descending=True)
        return [NotificationRead.model_validate(r) for r in rows]

    async def mark_read(self, notification_id: str, user_id: str) -> NotificationRead:
        rows = await self._store.update(
            NOTIFICATIONS, {"id": notification_id, "user_id": user_id}, {"is_read": True},
        )
        if not rows:
            raise NotFoundError("Notification not found")
        return NotificationRead.model_validate(rows[0])

    async def mark_all_read(self, user_id: str) -> int:
        rows = await self._store.update(
            NOTIFICATIONS, {"user_id": user_id, "is_read": False}, {"is_read": True},
        )
        return len(rows)

    async def delete(self, notification_id: str, user_id: str) -> None:
        rows = await self._store.delete(NOTIFICATIONS, {"id": notification_id, "user_id": user_id})
        if not rows:
            raise NotFoundError("Notification not found")
