"""Track Read Models — listings, favorites, comments, and relation status.

Invariants:
    - likes_count and is_liked are computed per query (correlated subqueries), never stored
    - Listings are capped at LISTING_LIMIT rows, newest first
    - Anonymous callers (caller_uid=None) always see is_liked=False
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Select, func, literal, select, true
from sqlalchemy.ext.asyncio import AsyncSession

from soundlike.models import Comment, Like, Track

LISTING_LIMIT = 50


@dataclass(frozen=True)
class TrackView:
    id: int
    filename: str
    title: str
    artist: str
    lyrics: str
    uploader_uid: str
    uploader_name: str
    created_at: datetime
    likes_count: int
    is_liked: bool


def _likes_count():
    return (
        select(func.count(Like.id))
        .where(Like.track_id == Track.id)
        .correlate(Track)
        .scalar_subquery()
    )


def _track_view_query(caller_uid: str | None) -> Select:
    if caller_uid:
        is_liked = (
            select(Like.id)
            .where(Like.track_id == Track.id, Like.user_uid == caller_uid)
            .correlate(Track)
            .exists()
        )
    else:
        is_liked = literal(False)
    return select(
        Track,
        _likes_count().label("likes_count"),
        is_liked.label("is_liked"),
    )


def _to_view(track: Track, likes_count: int, is_liked: bool) -> TrackView:
    return TrackView(
        id=track.id,
        filename=track.filename,
        title=track.title,
        artist=track.artist or "",
        lyrics=track.lyrics or "",
        uploader_uid=track.uploader_uid,
        uploader_name=track.uploader_name or "",
        created_at=track.created_at,
        likes_count=int(likes_count or 0),
        is_liked=bool(is_liked),
    )


async def list_tracks(
    db: AsyncSession,
    caller_uid: str | None = None,
    uploader_uid: str | None = None,
) -> list[TrackView]:
    """Newest tracks, optionally for one uploader, with caller-relative like state."""
    query = _track_view_query(caller_uid)
    if uploader_uid:
        query = query.where(Track.uploader_uid == uploader_uid)
    query = query.order_by(Track.created_at.desc(), Track.id.desc()).limit(LISTING_LIMIT)
    result = await db.execute(query)
    return [_to_view(*row) for row in result.all()]


async def list_favorites(db: AsyncSession, uid: str) -> list[TrackView]:
    """Tracks the user liked, most recent like first."""
    query = (
        select(Track, _likes_count().label("likes_count"), true().label("is_liked"))
        .join(Like, Like.track_id == Track.id)
        .where(Like.user_uid == uid)
        .order_by(Like.created_at.desc(), Like.id.desc())
        .limit(LISTING_LIMIT)
    )
    result = await db.execute(query)
    return [_to_view(*row) for row in result.all()]


async def count_likes(db: AsyncSession, track_id: int) -> int:
    result = await db.execute(
        select(func.count(Like.id)).where(Like.track_id == track_id),
    )
    return result.scalar_one()


async def list_comments(db: AsyncSession, track_id: int) -> list[Comment]:
    """Comments on a track, oldest first."""
    result = await db.execute(
        select(Comment)
        .where(Comment.track_id == track_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc()),
    )
    return list(result.scalars().all())


async def display_name_owner(
    db: AsyncSession, display_name: str, exclude_uid: str,
) -> str | None:
    """Uid of another uploader whose live tracks carry display_name, if any."""
    result = await db.execute(
        select(Track.uploader_uid)
        .where(
            Track.uploader_name == display_name,
            Track.uploader_uid != exclude_uid,
        )
        .limit(1),
    )
    return result.scalar_one_or_none()
