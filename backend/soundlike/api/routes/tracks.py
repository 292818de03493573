"""Track Routes — listing, favorites, upload, like toggle, and track deletion.

Invariants:
    - Listing is public; an invalid or missing token lists anonymously
    - Upload and like require a verified e-mail
    - Upload reads at most max_upload_bytes + 1 bytes: oversized payloads are rejected
      by core/enforce_upload.py without buffering the whole request
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from soundlike.api.dependencies import (
    get_current_identity, get_db_manager, get_deletion_orchestrator,
    get_optional_identity, get_settings_from_app, get_toggle_engine,
    get_upload_service, require_verified,
)
from soundlike.config import Settings
from soundlike.core.domain_types import RelationKind
from soundlike.core.repository_protocols import VerifiedIdentity
from soundlike.infrastructure.database import DatabaseSessionManager
from soundlike.schemas.account import MessageResponse
from soundlike.schemas.track import (
    LikeToggleResponse, TrackResponse, UploadResponse,
)
from soundlike.services import track_queries
from soundlike.services.deletion import DeletionOrchestrator
from soundlike.services.toggle_engine import ToggleEngine
from soundlike.services.upload_commit import UploadCommitService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["tracks"])


@router.get("/tracks", response_model=list[TrackResponse])
async def list_tracks(
    uploader_uid: str | None = Query(None),
    user: VerifiedIdentity | None = Depends(get_optional_identity),
    manager: DatabaseSessionManager = Depends(get_db_manager),
):
    """Newest tracks, optionally filtered by uploader."""
    async with manager.session() as db:
        return await track_queries.list_tracks(
            db, caller_uid=user.uid if user else None, uploader_uid=uploader_uid,
        )


@router.get("/tracks/favorites", response_model=list[TrackResponse])
async def list_favorites(
    user: VerifiedIdentity = Depends(get_current_identity),
    manager: DatabaseSessionManager = Depends(get_db_manager),
):
    async with manager.session() as db:
        return await track_queries.list_favorites(db, user.uid)


@router.post("/upload", response_model=UploadResponse)
async def upload_track(
    file: UploadFile = File(...),
    title: str = Form(""),
    artist: str = Form(""),
    lyrics: str = Form(""),
    user: VerifiedIdentity = Depends(require_verified("upload")),
    service: UploadCommitService = Depends(get_upload_service),
    settings: Settings = Depends(get_settings_from_app),
):
    """Store the audio blob and its metadata row as one unit."""
    data = await file.read(settings.max_upload_bytes + 1)
    ref = await service.commit_upload(
        owner_uid=user.uid,
        owner_name=user.display_name,
        title=title,
        artist=artist,
        lyrics=lyrics,
        filename=file.filename or "",
        data=data,
    )
    return UploadResponse(
        message="File uploaded successfully!",
        track_id=ref.id,
        filename=ref.filename,
    )


@router.delete("/track/{track_id}", response_model=MessageResponse)
async def delete_track(
    track_id: int,
    user: VerifiedIdentity = Depends(get_current_identity),
    orchestrator: DeletionOrchestrator = Depends(get_deletion_orchestrator),
):
    await orchestrator.delete_track(user.uid, track_id)
    return MessageResponse(message="Track deleted successfully!")


@router.post("/track/{track_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
    track_id: int,
    user: VerifiedIdentity = Depends(require_verified("like tracks")),
    engine: ToggleEngine = Depends(get_toggle_engine),
):
    result = await engine.toggle(
        user.uid, track_id, RelationKind.LIKE, actor_name=user.display_name,
    )
    return LikeToggleResponse(likes_count=result.count or 0, is_liked=result.active)
