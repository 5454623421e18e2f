"""FastAPI dependency providers for the store, identity and per-actor controllers."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, HTTPException, Request

from pawlink.config import Settings, get_settings
from pawlink.db.engine import async_session_factory
from pawlink.db.store import RecordStore
from pawlink.services.identity import Actor, IdentityContext
from pawlink.services.lifecycle import LifecycleSessions, RescueLifecycleController
from pawlink.services.notifications import NotificationDispatcher
from pawlink.services.report_repository import ReportRepository

USER_ID_HEADER = "X-User-Id"


@lru_cache
def get_settings_dep() -> Settings:
    return get_settings()


@lru_cache
def get_lifecycle_sessions() -> LifecycleSessions:
    return LifecycleSessions(max_size=get_settings_dep().sessions.max_cached)


def get_store(settings: Settings = Depends(get_settings_dep)) -> RecordStore:
    return RecordStore(async_session_factory, timeout=settings.store.timeout_seconds)


def get_repository(store: RecordStore = Depends(get_store)) -> ReportRepository:
    return ReportRepository(store)


def get_dispatcher(store: RecordStore = Depends(get_store)) -> NotificationDispatcher:
    return NotificationDispatcher(store)


async def get_identity(
    request: Request,
    store: RecordStore = Depends(get_store),
) -> IdentityContext:
    """Resolve the actor from the identity provider's user id header."""
    return await IdentityContext.from_user_id(store, request.headers.get(USER_ID_HEADER))


async def require_actor(identity: IdentityContext = Depends(get_identity)) -> Actor:
    actor = identity.get_current_user()
    if actor is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return actor


def get_controller(
    actor: Actor = Depends(require_actor),
    repository: ReportRepository = Depends(get_repository),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    settings: Settings = Depends(get_settings_dep),
    sessions: LifecycleSessions = Depends(get_lifecycle_sessions),
) -> RescueLifecycleController:
    return sessions.get(actor, repository, dispatcher, settings.scheduling)
