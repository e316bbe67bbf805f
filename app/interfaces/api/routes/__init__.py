from fastapi import FastAPI

from .audit_events import router as audit_events_router
from .notifications import router as notifications_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(audit_events_router)
    app.include_router(notifications_router)
