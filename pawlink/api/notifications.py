"""Notification API — the recipient's inbox."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from pawlink.dependencies import get_dispatcher, require_actor
from pawlink.schemas.notification import NotificationRead
from pawlink.services.identity import Actor
from pawlink.services.notifications import NotificationDispatcher

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationRead])
async def list_notifications(
    unread: bool = Query(default=False),
    actor: Actor = Depends(require_actor),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return await dispatcher.list_for_user(actor.id, unread_only=unread)


@router.post("/read-all")
async def mark_all_read(
    actor: Actor = Depends(require_actor),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    updated = await dispatcher.mark_all_read(actor.id)
    return {"ok": True, "updated": updated}


@router.post("/{notification_id}/read", response_model=NotificationRead)
async def mark_read(
    notification_id: str,
    actor: Actor = Depends(require_actor),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return await dispatcher.mark_read(notification_id, actor.id)


@router.delete("/{notification_id}", status_code=204)
async def delete_notification(
    notification_id: str,
    actor: Actor = Depends(require_actor),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    await dispatcher.delete(notification_id, actor.id)
