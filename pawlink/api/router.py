"""Central router that includes all sub-routers."""

from fastapi import APIRouter

from pawlink.api.reports import router as reports_router
from pawlink.api.notifications import router as notifications_router

api_router = APIRouter()
api_router.include_router(reports_router)
api_router.include_router(notifications_router)
