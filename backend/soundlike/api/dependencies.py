"""API Dependencies — injected components, authenticated identity, and service factories.

Invariants:
    - Every component comes from request.app.state (populated by the lifespan or by test
      fixtures); routes never import module-level singletons
    - get_current_identity raises AuthenticationError (401) for missing/invalid tokens
    - require_verified(action) additionally raises EmailNotVerifiedError (403)
    - get_optional_identity never raises: an invalid token on a public route is anonymous

Design Decisions:
    - Services are cheap per-request objects wrapping long-lived components
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from soundlike.config import Settings
from soundlike.core.errors import (
    AuthenticationError, EmailNotVerifiedError, SoundLikeError,
)
from soundlike.core.repository_protocols import (
    BlobStore, IdentityProvider, VerifiedIdentity,
)
from soundlike.infrastructure.database import DatabaseSessionManager
from soundlike.services.comments import CommentService
from soundlike.services.deletion import DeletionOrchestrator
from soundlike.services.notification_fanout import NotificationFanout
from soundlike.services.profile import ProfileService
from soundlike.services.toggle_engine import ToggleEngine
from soundlike.services.upload_commit import UploadCommitService

_bearer = HTTPBearer(auto_error=False)


# ─── Components ──────────────────────────────────────────────────

def get_settings_from_app(request: Request) -> Settings:
    return request.app.state.settings


def get_db_manager(request: Request) -> DatabaseSessionManager:
    return request.app.state.db


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store


def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity_provider


def get_fanout(request: Request) -> NotificationFanout:
    return request.app.state.fanout


# ─── Identity ────────────────────────────────────────────────────

async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> VerifiedIdentity:
    token = credentials.credentials.strip() if credentials else ""
    if not token:
        raise AuthenticationError("Authorization header is missing")
    return await identity.verify_token(token)


async def get_optional_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> VerifiedIdentity | None:
    token = credentials.credentials.strip() if credentials else ""
    if not token:
        return None
    try:
        return await identity.verify_token(token)
    except SoundLikeError:
        return None


def require_verified(action: str):
    """Dependency factory: authenticated identity with a verified e-mail."""

    async def _verified_identity(
        user: VerifiedIdentity = Depends(get_current_identity),
    ) -> VerifiedIdentity:
        if not user.email_verified:
            raise EmailNotVerifiedError(action)
        return user

    return _verified_identity


# ─── Services ────────────────────────────────────────────────────

def get_upload_service(
    db: DatabaseSessionManager = Depends(get_db_manager),
    blobs: BlobStore = Depends(get_blob_store),
    fanout: NotificationFanout = Depends(get_fanout),
    settings: Settings = Depends(get_settings_from_app),
) -> UploadCommitService:
    return UploadCommitService(
        db, blobs, fanout,
        max_upload_bytes=settings.max_upload_bytes,
        allowed_formats=settings.allowed_audio_formats,
    )


def get_toggle_engine(
    db: DatabaseSessionManager = Depends(get_db_manager),
    fanout: NotificationFanout = Depends(get_fanout),
) -> ToggleEngine:
    return ToggleEngine(db, fanout)


def get_deletion_orchestrator(
    db: DatabaseSessionManager = Depends(get_db_manager),
    blobs: BlobStore = Depends(get_blob_store),
) -> DeletionOrchestrator:
    return DeletionOrchestrator(db, blobs)


def get_comment_service(
    db: DatabaseSessionManager = Depends(get_db_manager),
    fanout: NotificationFanout = Depends(get_fanout),
) -> CommentService:
    return CommentService(db, fanout)


def get_profile_service(
    db: DatabaseSessionManager = Depends(get_db_manager),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> ProfileService:
    return ProfileService(db, identity)
