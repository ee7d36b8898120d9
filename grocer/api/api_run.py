from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from grocer.api.routes import (
    account, expenses, inventory, notifications, orders, pantry, shops
)
from grocer.events.activity_log import ACTIVITY_LOG
from grocer.events.notification_feed import FEEDS
from grocer.infra.Api_Client import RemoteError

# Logging
logger = logging.getLogger("grocer_app")

# Initialize FastAPI app
app = FastAPI(title="Smart Grocer API")

# Include routers
app.include_router(account.router)
app.include_router(shops.router)
app.include_router(inventory.router)
app.include_router(pantry.router)
app.include_router(orders.router)
app.include_router(expenses.router)
app.include_router(notifications.router)


@app.exception_handler(RemoteError)
async def _remote_error(request: Request, exc: RemoteError):
    """Remote store failures keep the remote status; no status means the store was unreachable."""
    status = exc.status_code if exc.status_code and exc.status_code < 500 else 502
    logger.error("%s %s failed upstream: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status, content={"error": exc.message})


@app.on_event("startup")
def _startup_activity_log():
    """Register event bus subscribers for the activity log when the app starts."""
    ACTIVITY_LOG.start()
    logger.info("Activity log observers started")


@app.on_event("shutdown")
def _stop_pollers():
    FEEDS.stop_all()
    ACTIVITY_LOG.stop()
    logger.info("Notification pollers and activity observers stopped")


@app.get("/api/activity")
def get_activity(since: Optional[int] = None):
    """Recent order and refill activity; pass next_cursor back as since to get only newer entries."""
    return ACTIVITY_LOG.get_events(since)


@app.get("/health")
def health():
    return {"status": "ok"}
