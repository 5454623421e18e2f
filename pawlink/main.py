"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from pawlink.api.errors import register_exception_handlers
from pawlink.api.router import api_router
from pawlink.config import get_settings
from pawlink.db.engine import create_tables, engine
from pawlink.dependencies import get_lifecycle_sessions

_settings = get_settings()
logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    yield
    # Let in-flight reporter notifications finish before the engine goes away
    await get_lifecycle_sessions().drain()
    await engine.dispose()


app = FastAPI(
    title="PawLink",
    description="Stray-animal rescue reports: responder feed, pickup scheduling and reporter notifications.",
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)
app.include_router(api_router)


@app.get("/healthz")
async def healthz():
    return {"ok": True}
