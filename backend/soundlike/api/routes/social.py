"""Social Routes — comments on tracks and follow relations between users.

Invariants:
    - Reading comments is public; posting requires a verified e-mail
    - Follow toggle requires a verified e-mail; follow status only authentication
"""

import logging

from fastapi import APIRouter, Depends

from soundlike.api.dependencies import (
    get_comment_service, get_current_identity, get_db_manager,
    get_toggle_engine, require_verified,
)
from soundlike.core.domain_types import RelationKind
from soundlike.core.repository_protocols import VerifiedIdentity
from soundlike.infrastructure.database import DatabaseSessionManager
from soundlike.schemas.account import MessageResponse
from soundlike.schemas.social import (
    CommentCreate, CommentResponse, FollowStatusResponse, FollowToggleResponse,
)
from soundlike.services import track_queries
from soundlike.services.comments import CommentService
from soundlike.services.toggle_engine import ToggleEngine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["social"])


# ─── Comments ────────────────────────────────────────────────────

@router.get("/track/{track_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    track_id: int,
    manager: DatabaseSessionManager = Depends(get_db_manager),
):
    async with manager.session() as db:
        return await track_queries.list_comments(db, track_id)


@router.post("/track/{track_id}/comment", response_model=MessageResponse)
async def post_comment(
    track_id: int,
    body: CommentCreate,
    user: VerifiedIdentity = Depends(require_verified("comment")),
    service: CommentService = Depends(get_comment_service),
):
    await service.post_comment(user.uid, user.display_name, track_id, body.content)
    return MessageResponse(message="Comment posted successfully!")


@router.delete("/comment/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: int,
    user: VerifiedIdentity = Depends(get_current_identity),
    service: CommentService = Depends(get_comment_service),
):
    await service.delete_comment(user.uid, comment_id)
    return MessageResponse(message="Comment deleted.")


# ─── Follows ─────────────────────────────────────────────────────

@router.post("/user/{uid}/follow", response_model=FollowToggleResponse)
async def toggle_follow(
    uid: str,
    user: VerifiedIdentity = Depends(require_verified("follow users")),
    engine: ToggleEngine = Depends(get_toggle_engine),
):
    result = await engine.toggle(user.uid, uid, RelationKind.FOLLOW)
    message = "Followed successfully." if result.active else "Unfollowed successfully."
    return FollowToggleResponse(is_following=result.active, message=message)


@router.get("/user/{uid}/follow/status", response_model=FollowStatusResponse)
async def follow_status(
    uid: str,
    user: VerifiedIdentity = Depends(get_current_identity),
    engine: ToggleEngine = Depends(get_toggle_engine),
):
    following = await engine.is_active(user.uid, uid, RelationKind.FOLLOW)
    return FollowStatusResponse(is_following=following)
