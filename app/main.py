"""ASGI entry point for the baby log insights service.

``uvicorn app.main:app``.  The lifespan configures logging and owns the
insights refresh scheduler.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.logging import setup_logging
from app.routers import alerts, health, insights, suggestions, today
from app.scheduler.jobs import shutdown_scheduler, start_scheduler

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    start_scheduler()
    logger.info("app_started", extra={"title": application.title})
    try:
        yield
    finally:
        shutdown_scheduler()
        logger.info("app_stopped")


app = FastAPI(
    title="Baby Log Insights API",
    description="Smart alerts and merged rule/AI suggestions for the baby log app",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["Health"])
for module, tag in (
    (suggestions, "Suggestions"),
    (alerts, "Alerts"),
    (today, "Today"),
    (insights, "Insights"),
):
    app.include_router(module.router, prefix=API_PREFIX, tags=[tag])
