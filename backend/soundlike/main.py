"""SoundLike API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SoundLikeError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Every long-lived component (database, blob store, identity provider, mail transport,
      notification dispatcher, fanout) is built in the lifespan and stored on app.state

Design Decisions:
    - Shutdown order is the reverse of startup: dispatcher first, engine last
    - Dispatcher drained before the database is disposed: queued notifications still
      need to read recipients
    - Blobs served from /uploads by StaticFiles, mounted AFTER API routes
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.engine import make_url

from soundlike.api.error_handlers import register_error_handlers
from soundlike.api.routes import account, health, social, tracks
from soundlike.config import Settings, get_settings
from soundlike.infrastructure.blob_store import LocalBlobStore
from soundlike.infrastructure.database import DatabaseSessionManager
from soundlike.infrastructure.identity_provider import FirebaseIdentityProvider
from soundlike.infrastructure.mail_transport import SmtpMailTransport
from soundlike.infrastructure.notification_dispatcher import NotificationDispatcher
from soundlike.infrastructure.observability import setup_logging
from soundlike.services.notification_fanout import NotificationFanout

logger = logging.getLogger(__name__)


def _ensure_sqlite_directory(database_url: str) -> None:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    _ensure_sqlite_directory(settings.database_url)
    db = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        busy_timeout_seconds=settings.database_busy_timeout_seconds,
    )
    if settings.database_auto_create:
        await db.create_all()

    identity = FirebaseIdentityProvider(settings.firebase_project_id)
    mail = SmtpMailTransport(
        host=settings.smtp_host,
        port=settings.smtp_port,
        user=settings.smtp_user,
        password=settings.smtp_password,
        sender=settings.smtp_from,
    )
    dispatcher = NotificationDispatcher(
        workers=settings.notification_workers,
        queue_size=settings.notification_queue_size,
    )
    dispatcher.start()

    app.state.settings = settings
    app.state.db = db
    app.state.blob_store = LocalBlobStore(settings.uploads_dir)
    app.state.identity_provider = identity
    app.state.fanout = NotificationFanout(
        db, identity, mail, dispatcher, settings.frontend_url,
    )
    logger.info("SoundLike API started")
    yield
    logger.info("SoundLike API shutting down")
    await dispatcher.stop(drain=True)
    await db.dispose()


app = FastAPI(
    title="SoundLike API", version="1.0.0", lifespan=lifespan,
)

# CORS — configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Routes — explicit registration
app.include_router(health.router)
app.include_router(tracks.router)
app.include_router(social.router)
app.include_router(account.router)

# Blobs — mounted AFTER API routes; directory created by LocalBlobStore at startup
app.mount(
    "/uploads",
    StaticFiles(directory=settings.uploads_dir, check_dir=False),
    name="uploads",
)

register_error_handlers(app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("soundlike.main:app", host="0.0.0.0", port=8080)
