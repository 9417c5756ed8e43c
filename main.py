"""FastAPI entrypoint for the Vehicle Care backend.

- `vehicle_care/routes/` for REST and WebSocket endpoints
- `vehicle_care/services/` for vehicle, service record and notification logic
- `vehicle_care/intelligence/` for the due calculator and channel preferences
- `vehicle_care/db/` for SQLAlchemy models and session management
- `vehicle_care/scheduler/` for APScheduler reminder jobs
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.exceptions import HTTPException

from vehicle_care.core.config import settings
from vehicle_care.core.domain_exceptions import DomainException
from vehicle_care.core.exceptions import domain_exception_handler, http_exception_handler
from vehicle_care.core.middleware import RequestContextMiddleware
from vehicle_care.db.init_db import init_db
from vehicle_care.routes import notifications, reports, services, users, vehicles
from vehicle_care.scheduler.reminder_scheduler import SchedulerState, start_scheduler
from vehicle_care.services.realtime import manager

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Initialize app resources before serving traffic."""
    init_db()
    logger.info("Database tables initialized.")

    # Scheduler threads publish real-time events onto this loop.
    manager.bind_loop(asyncio.get_running_loop())

    scheduler = None
    if settings.scheduler_enabled:
        try:
            scheduler = start_scheduler(SchedulerState())
        except Exception:
            logger.exception("Failed to start scheduler.")
    else:
        logger.info("Scheduler disabled on this instance (SCHEDULER_ENABLED=false).")

    yield

    # Graceful shutdown.
    if scheduler:
        scheduler.shutdown(wait=False)
        logger.info("Reminder scheduler shut down.")

app = FastAPI(
    title="Vehicle Care API",
    version="0.1.0",
    description="Vehicle service tracking with due-for-service reminders.",
    lifespan=lifespan,
)

app.add_middleware(RequestContextMiddleware)
app.add_exception_handler(DomainException, domain_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)

app.include_router(users.router)
app.include_router(vehicles.router)
app.include_router(services.router)
app.include_router(notifications.router)
app.include_router(notifications.ws_router)
app.include_router(reports.router)

@app.get("/", tags=["health"])
def root() -> dict[str, str]:
    """Simple status endpoint for uptime checks."""
    return {"status": "Vehicle Care Running"}
