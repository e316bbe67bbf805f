import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.application.use_cases.notifications import NotificationFanOut
from app.config import get_settings
from app.infrastructure.database import SessionLocal, engine, initialize_database
from app.infrastructure.notifications import NotificationConnectionManager, RealtimeDispatcher
from app.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the tables on startup and release the pool on shutdown."""

    initialize_database()
    yield
    engine.dispose()


def create_app() -> FastAPI:
    """Build the FastAPI application and its notification collaborators."""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(lifespan=lifespan)

    manager = NotificationConnectionManager() if settings.realtime_enabled else None
    dispatcher = RealtimeDispatcher(manager)
    ttl = settings.notification_default_ttl_days
    app.state.realtime_dispatcher = dispatcher
    app.state.notification_fan_out = NotificationFanOut(
        SessionLocal,
        dispatcher,
        default_ttl=timedelta(days=ttl) if ttl else None,
    )

    # Browser clients served from the front-end dev server.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:4200"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
